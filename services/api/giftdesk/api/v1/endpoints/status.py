from __future__ import annotations

from fastapi import APIRouter

from giftdesk.services.supabase_status import SupabaseCheck, check_auth, check_connection

router = APIRouter()


def _as_dict(check: SupabaseCheck) -> dict:
    return {"success": check.success, "message": check.message, "statusCode": check.status_code}


@router.get("/status/supabase")
def supabase_status() -> dict:
    connection = check_connection()
    auth = check_auth()
    return {
        "ok": connection.success and auth.success,
        "connection": _as_dict(connection),
        "auth": _as_dict(auth),
    }
