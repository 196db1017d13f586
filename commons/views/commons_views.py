from django.http import JsonResponse
from django.db import connection, DatabaseError
from datetime import datetime, timezone

def liveness(request):
    return JsonResponse({"ok": True})

def readiness(request):
    try:
        with connection.cursor() as cur:
            cur.execute("SELECT 1")
            cur.fetchone()
        return JsonResponse({"ok": True})
    except DatabaseError as e:
        return JsonResponse({"ok": False, "error": str(e)}, status=503)

def time_now(request):
    now = datetime.now(timezone.utc).astimezone()
    return JsonResponse({"now": now.isoformat()})
