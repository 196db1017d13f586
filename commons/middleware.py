import uuid, time, json, logging
from django.utils.deprecation import MiddlewareMixin

logger = logging.getLogger("django.request")

class RequestLogMiddleware(MiddlewareMixin):
    def process_request(self, request):
        request.request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request._start_time = time.time()
    def process_response(self, request, response):
        latency = int((time.time() - getattr(request, "_start_time", time.time())) * 1000)
        user = getattr(request, "user", None)
        payload = {
            "request_id": getattr(request, "request_id", "-"),
            "path": request.path,
            "method": request.method,
            "status": response.status_code,
            "latency_ms": latency,
            "id_tenant": getattr(user, "id_tenant", None),
        }
        logger.info(json.dumps(payload, ensure_ascii=False))
        response["X-Request-ID"] = payload["request_id"]
        return response
