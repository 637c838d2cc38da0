from client.availability import SlugAvailabilityChecker


class StubApi:
    def __init__(self, answers=None, during_check=None):
        self.answers = answers or {}
        self.during_check = during_check
        self.checked = []

    def check_slug_availability(self, slug):
        self.checked.append(slug)
        if self.during_check:
            self.during_check()
        answer = self.answers.get(slug, True)
        if isinstance(answer, Exception):
            raise answer
        return {"available": answer}


def test_debounces_to_the_last_request(manual_timers):
    api = StubApi()
    checker = SlugAvailabilityChecker(api, delay=0.35, timer_factory=manual_timers)

    checker.request("Leh")
    assert checker.request("Leh Ride") == "leh-ride"

    first, second = manual_timers.created
    assert first.cancelled and not second.cancelled
    assert second.interval == 0.35
    assert checker.checking

    first.fire()
    second.fire()
    assert api.checked == ["leh-ride"]
    assert checker.available is True
    assert not checker.checking
    assert checker.result_for("leh-ride") is True


def test_stale_response_is_dropped(manual_timers):
    checker = None
    api = StubApi(answers={"goa": False}, during_check=lambda: checker.request("goa-trip"))
    checker = SlugAvailabilityChecker(api, timer_factory=manual_timers)

    checker.request("goa")
    manual_timers.created[0].fire()

    # the answer for "goa" arrived after "goa-trip" was requested
    assert checker.available is None
    assert checker.result_for("goa") is None
    assert checker.checking


def test_taken_slug_reported(manual_timers):
    results = []
    checker = SlugAvailabilityChecker(StubApi(answers={"leh-ride": False}), timer_factory=manual_timers,
                                      on_result=lambda slug, available: results.append((slug, available)))
    checker.request("leh-ride")
    manual_timers.created[0].fire()
    assert checker.result_for("leh-ride") is False
    assert results == [("leh-ride", False)]


def test_failed_check_is_unknown(manual_timers):
    checker = SlugAvailabilityChecker(StubApi(answers={"leh-ride": RuntimeError("boom")}), timer_factory=manual_timers)
    checker.request("leh-ride")
    manual_timers.created[0].fire()
    assert checker.available is None
    assert not checker.checking


def test_empty_slug_schedules_nothing(manual_timers):
    checker = SlugAvailabilityChecker(StubApi(), timer_factory=manual_timers)
    assert checker.request("🎉") == ""
    assert manual_timers.created == []
    assert not checker.checking


def test_result_for_other_slug_is_unknown(manual_timers):
    checker = SlugAvailabilityChecker(StubApi(), timer_factory=manual_timers)
    checker.request("leh-ride")
    manual_timers.created[0].fire()
    assert checker.result_for("goa") is None
