# user_auth/utils.py
import json
import os
import re

import firebase_admin
from firebase_admin import auth, credentials
from flask import request, jsonify, g, current_app
from functools import wraps

BEARER = re.compile(r'^Bearer (.+)$', re.IGNORECASE)


def initialize_firebase_app(service_account_content=None, service_account_path=None):
    """
    Initializes the Firebase Admin SDK once per process.

    Credentials come from the JSON content (env var) first, then a key file,
    then Application Default Credentials (Cloud Run / Functions).
    """
    if firebase_admin._apps:  # already initialized
        return firebase_admin.get_app()
    if service_account_content:
        cred = credentials.Certificate(json.loads(service_account_content))
    elif service_account_path and os.path.exists(service_account_path):
        cred = credentials.Certificate(service_account_path)
    else:
        cred = credentials.ApplicationDefault()
    return firebase_admin.initialize_app(cred)


def verify_firebase_token(id_token):
    """
    Verifies a Firebase ID token.
    Returns the user's UID if valid, None otherwise.
    """
    try:
        decoded_token = auth.verify_id_token(id_token)
        return decoded_token['uid']
    except Exception as e:
        current_app.logger.warning(f"Error verifying Firebase ID token: {e}")
        return None


def _bearer_token():
    match = BEARER.match(request.headers.get('Authorization', ''))
    return match.group(1) if match else None


def login_required_user(f):
    """
    Decorator for Flask routes to ensure a user is authenticated via Firebase ID token.
    Requires the client to send a 'Authorization: Bearer <id_token>' header.
    Stores the user's UID in `g.user_uid` for the rest of the request.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        id_token = _bearer_token()
        if not id_token:
            return jsonify({"error": "missing-auth"}), 401

        uid = verify_firebase_token(id_token)
        if not uid:
            return jsonify({"error": "invalid-token"}), 401

        g.user_uid = uid
        return f(*args, **kwargs)
    return decorated_function


def optional_user(f):
    """Like login_required_user, but anonymous requests go through with `g.user_uid = None`."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        id_token = _bearer_token()
        g.user_uid = verify_firebase_token(id_token) if id_token else None
        return f(*args, **kwargs)
    return decorated_function
