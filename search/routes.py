# search/routes.py
import time

from flask import Blueprint, request, jsonify, current_app

from config import SEARCH_MAX_PER_TYPE, SEARCH_MIN_QUERY_LEN, SEARCH_PREFIX_QUERY_LIMIT
from utils.firestore_paths import trips_col, users_col


def prefix_range(prefix):
    """Start/end bounds that make a Firestore range query behave as a prefix match."""
    return prefix, prefix + "\uf8ff"


def case_variants(raw):
    """Lowercased and first-letter-uppercased forms of the query, without duplicates."""
    lower = raw.lower()
    upper = raw[0].upper() + raw[1:]
    return [lower] if lower == upper else [lower, upper]


def create_search_bp(db_instance):
    search_bp = Blueprint('search_bp', __name__, url_prefix='/api')

    def two_prefix_query(col, field, raw, where_clause=None):
        """
        Runs one prefix query per case variant of `raw` on `field` and merges
        the hits by document id (first hit wins, insertion order kept).
        A failing variant is logged and skipped.
        """
        results = {}
        if not raw or len(raw) < SEARCH_MIN_QUERY_LEN:
            return results

        for prefix in case_variants(raw):
            start, end = prefix_range(prefix)
            try:
                query = col
                if where_clause:
                    query = query.where(*where_clause)
                query = query.order_by(field).start_at({field: start}).end_at({field: end}).limit(SEARCH_PREFIX_QUERY_LIMIT)
                docs = list(query.stream())
            except Exception as e:
                current_app.logger.warning(f"[search] prefix query failed field='{field}' prefix='{prefix}': {e}")
                continue

            current_app.logger.debug(f"[search] prefix='{prefix}' field='{field}' -> {len(docs)} docs")
            for doc in docs:
                if doc.id not in results:
                    results[doc.id] = {"id": doc.id, **(doc.to_dict() or {})}
        return results

    def collect(matches_by_field, limit):
        items = []
        for matches in matches_by_field:
            for item_id, item in matches().items():
                if len(items) >= limit:
                    return items
                if all(existing["id"] != item_id for existing in items):
                    items.append(item)
            if len(items) >= limit:
                break
        return items

    @search_bp.route('/search', methods=['GET'])
    def search():
        started = time.monotonic()
        raw = (request.args.get('q') or "").strip()

        if len(raw) < SEARCH_MIN_QUERY_LEN:
            return jsonify({"users": [], "trips": [], "tags": []}), 200

        try:
            users_ref = users_col(db_instance)
            users = collect([
                lambda: two_prefix_query(users_ref, 'handle', raw),
                lambda: two_prefix_query(users_ref, 'displayName', raw),
            ], SEARCH_MAX_PER_TYPE)

            trips_ref = trips_col(db_instance)
            public_only = ('visibility', '==', 'public')
            trips = collect([
                lambda: two_prefix_query(trips_ref, 'title', raw, public_only),
                lambda: two_prefix_query(trips_ref, 'destination', raw, public_only),
            ], SEARCH_MAX_PER_TYPE)
        except Exception as e:
            current_app.logger.error(f"/api/search error for q='{raw}': {e}", exc_info=True)
            return jsonify({"error": "search_failed", "message": str(e)}), 500

        elapsed_ms = int((time.monotonic() - started) * 1000)
        current_app.logger.info(f"[search] q='{raw}' users={len(users)} trips={len(trips)} time={elapsed_ms}ms")
        return jsonify({"users": users, "trips": trips, "tags": []}), 200

    return search_bp
