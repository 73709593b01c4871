"""
Privileged account deletion.

Order of checks, terminal on the first failure:
authenticate -> require admin -> rate limit -> validate body ->
re-verify the admin's password -> refuse self-deletion ->
refuse admin targets -> delete.
"""

import structlog
from fastapi import APIRouter, Depends, Request

from edge_functions.auth import CredentialVerifier, RoleAuthority, RoleCheck
from edge_functions.config import FunctionsConfig, config as functions_config
from edge_functions.dependencies import (
    DELETE_USER_OPERATION,
    get_auth_client,
    get_delete_user_limiter,
    get_functions_config,
    get_role_authority,
    get_verifier,
)
from edge_functions.errors import (
    Forbidden,
    InvalidInput,
    RateLimited,
    Unauthenticated,
    UpstreamFailure,
    catch_unexpected,
)
from edge_functions.models import DeleteUserRequest, DeleteUserResponse, read_json_body
from platform_clients.base import PlatformError
from platform_clients.supabase_auth import SupabaseAuthClient
from utilities.logger import AuditLogger
from utilities.rate_limit import FixedWindowRateLimiter
from utilities.timing import minimum_duration

logger = structlog.get_logger(__name__)
audit = AuditLogger(DELETE_USER_OPERATION)

router = APIRouter(tags=["Accounts"])


@router.post("/delete-user", response_model=DeleteUserResponse)
@minimum_duration(floor_provider=lambda: functions_config.min_response_ms)
@catch_unexpected
async def delete_user(
    request: Request,
    verifier: CredentialVerifier = Depends(get_verifier),
    roles: RoleAuthority = Depends(get_role_authority),
    auth_client: SupabaseAuthClient = Depends(get_auth_client),
    limiter: FixedWindowRateLimiter = Depends(get_delete_user_limiter),
    settings: FunctionsConfig = Depends(get_functions_config),
):
    """
    Delete a user account on behalf of an administrator.

    Requires a bearer token for an admin and the admin's current password.
    Profile, role grants, reading progress and owned books are removed by the
    platform's cascade as part of the account deletion.
    """
    claims = await verifier.verify(request.headers.get("Authorization"))
    caller_id = claims.subject_id

    await roles.require(caller_id)

    rate_limit_key = limiter.make_key(DELETE_USER_OPERATION, caller_id)
    if not limiter.allow(rate_limit_key):
        audit.log_rate_limited(caller_id, rate_limit_key)
        raise RateLimited("Too many attempts. Please try again later.")

    body = await read_json_body(request, DeleteUserRequest)
    if not body.user_id or not body.admin_password:
        raise InvalidInput("User ID and admin password are required")

    if not claims.email:
        audit.log_denied("caller has no email for step-up", actor_id=caller_id)
        raise Unauthenticated("Invalid admin password")
    try:
        await auth_client.sign_in_with_password(claims.email, body.admin_password)
    except PlatformError as e:
        audit.log_denied(
            "step-up password rejected",
            actor_id=caller_id,
            status_code=e.status_code,
            timed_out=e.timed_out
        )
        raise Unauthenticated("Invalid admin password")

    target_id = body.user_id
    if target_id == caller_id:
        audit.log_denied("self-deletion", actor_id=caller_id)
        raise InvalidInput("Cannot delete your own account")

    if not settings.allow_admin_target_deletion:
        target_role = await roles.check(target_id)
        if target_role is not RoleCheck.DENIED:
            audit.log_denied(
                "target is an administrator",
                actor_id=caller_id,
                target_id=target_id,
                result=target_role.value
            )
            raise Forbidden("Cannot delete an administrator account")

    try:
        await auth_client.admin_delete_user(target_id)
    except PlatformError as e:
        # Not retried: the outcome of an ambiguous failure must be checked by hand.
        logger.error(
            "Delete user failed",
            actor_id=caller_id,
            target_id=target_id,
            status_code=e.status_code,
            timed_out=e.timed_out,
            detail=e.detail,
            manual_followup=e.timed_out or e.status_code is None or e.status_code >= 500
        )
        if e.is_not_found:
            raise UpstreamFailure("User not found")
        raise UpstreamFailure("Failed to delete user")

    audit.log_account_deleted(caller_id, claims.email, target_id)
    return DeleteUserResponse(success=True, message="User deleted successfully")
