# blogwebapp/api/auth/routes.py

import logging
import jwt
from flask import Blueprint, request, jsonify, current_app
from flask_jwt_extended import (
    create_access_token,
    create_refresh_token,
    jwt_required,
    get_jwt_identity,
    get_jwt
)
from marshmallow import ValidationError

from blogwebapp.api.auth.schemas import (
    RegisterSchema, LoginSchema, MagicLinkRequestSchema, LogoutRequestSchema, AuthUserSchema,
    CheckPasswordSchema
)
from blogwebapp.api.auth.services import EmailAlreadyRegisteredError, InvalidCredentialsError, MagicLinkInvalidError
from blogwebapp.services.mail_service import MailDeliveryError

auth_bp = Blueprint('auth_bp', __name__)


def _issue_tokens(user) -> dict:
    """Access/refresh token pair carrying the user's role as a claim."""
    claims = {"role": user.role}
    return {
        "access_token": create_access_token(identity=user.user_id, additional_claims=claims),
        "refresh_token": create_refresh_token(identity=user.user_id, additional_claims=claims),
        "user": AuthUserSchema().dump(user)
    }


@auth_bp.route('/register', methods=['POST'])
def register():
    """Email/password sign-up. A duplicate email is a 409."""
    auth_service = current_app.services['auth']
    try:
        data = RegisterSchema().load(request.get_json() or {})
        user = auth_service.register(
            data['email'], data['password'], data.get('first_name'), data.get('last_name')
        )
        return jsonify({"message": "User registered successfully", "user": AuthUserSchema().dump(user)}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except EmailAlreadyRegisteredError as e:
        return jsonify({"error_code": "EMAIL_ALREADY_REGISTERED", "message": str(e)}), 409


@auth_bp.route('/login', methods=['POST'])
def login():
    auth_service = current_app.services['auth']
    try:
        data = LoginSchema().load(request.get_json() or {})
        user = auth_service.login(data['email'], data['password'])
        return jsonify(_issue_tokens(user)), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except InvalidCredentialsError as e:
        return jsonify({"error_code": "INVALID_CREDENTIALS", "message": str(e)}), 401


@auth_bp.route('/magic-link', methods=['POST'])
def request_magic_link():
    """
    Sends a login link by email.
    The response is the same whether or not the address had an account.
    """
    auth_service = current_app.services['auth']
    try:
        data = MagicLinkRequestSchema().load(request.get_json() or {})
        auth_service.request_magic_link(data['email'])
        return jsonify({"message": "If the address is valid, a login link is on its way."}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except MailDeliveryError:
        return jsonify({"error_code": "EMAIL_SEND_FAILED", "message": "The login email could not be sent."}), 502


@auth_bp.route('/magic-login', methods=['GET'])
def magic_login():
    """Exchanges a magic link token for a token pair. Each link works once."""
    auth_service = current_app.services['auth']
    try:
        user = auth_service.verify_magic_link(request.args.get('token', ''))
        return jsonify(_issue_tokens(user)), 200
    except MagicLinkInvalidError as e:
        return jsonify({"error_code": "INVALID_MAGIC_LINK", "message": str(e)}), 401


@auth_bp.route('/token/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh_token():
    """
    New access token from a valid, non-revoked refresh token.
    The role claim is re-read so role changes apply on refresh.
    """
    current_user_id = get_jwt_identity()
    user = current_app.services['users'].get_user(current_user_id)
    if not user:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": "User not found."}), 404
    new_access_token = create_access_token(identity=current_user_id, additional_claims={"role": user.role})
    return jsonify(access_token=new_access_token), 200


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Adds the given access and refresh tokens to the blocklist."""
    auth_service = current_app.services['auth']
    try:
        data = LogoutRequestSchema().load(request.get_json() or {})

        secret_key = current_app.config['JWT_SECRET_KEY']
        algorithm = current_app.config.get('JWT_ALGORITHM', 'HS256')

        # expired tokens are still revoked
        decoded_access = jwt.decode(data['access_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})
        decoded_refresh = jwt.decode(data['refresh_token'], secret_key, algorithms=[algorithm], options={"verify_exp": False})

        auth_service.logout_user(
            decoded_access['jti'], decoded_access['exp'],
            decoded_refresh['jti'], decoded_refresh['exp']
        )
        return jsonify({"message": "Logged out."}), 200

    except ValidationError as e:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": e.messages}), 400
    except jwt.PyJWTError as e:
        logging.error(f"JWT decode failed: {e}", exc_info=True)
        return jsonify({"error_code": "INVALID_TOKEN", "message": "Invalid token."}), 422
    except Exception as e:
        logging.error(f"Logout failed: {e}", exc_info=True)
        return jsonify({"error_code": "LOGOUT_FAILED", "message": "Logout failed."}), 500


@auth_bp.route('/validate-token', methods=['POST'])
@jwt_required()
def validate_token():
    """Lets the client check a stored access token."""
    return jsonify({"valid": True, "user_id": get_jwt_identity(), "role": get_jwt().get('role')}), 200


@auth_bp.route('/check-password', methods=['POST'])
@jwt_required()
def check_password():
    """Confirms the caller's current password, e.g. before a sensitive change."""
    auth_service = current_app.services['auth']
    try:
        data = CheckPasswordSchema().load(request.get_json() or {})
        valid = auth_service.check_password(get_jwt_identity(), data['password'])
        return jsonify({"valid": valid}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except InvalidCredentialsError as e:
        return jsonify({"error_code": "USER_NOT_FOUND", "message": str(e)}), 404
