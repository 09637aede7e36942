from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.response import Response


def error_response(message, status_code, extra=None):
    payload = {"success": False, "message": message}
    if extra:
        payload.update(extra)
    return Response(payload, status=status_code)


class EnvelopeMixin:
    """
    Wraps successful DRF responses in the ``{success, data, message}``
    envelope so generic views can be used unchanged.
    """

    success_messages = {}
    not_found_message = None

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            if self.not_found_message:
                raise NotFound(self.not_found_message)
            raise

    def finalize_response(self, request, response, *args, **kwargs):
        if 200 <= response.status_code < 300:
            data = getattr(response, "data", None)
            already_wrapped = isinstance(data, dict) and "success" in data
            if not already_wrapped:
                if response.status_code == status.HTTP_204_NO_CONTENT:
                    response.status_code = status.HTTP_200_OK
                payload = {"success": True}
                message = self.success_messages.get(request.method)
                if message:
                    payload["message"] = message
                if data is not None:
                    payload["data"] = data
                response.data = payload
        return super().finalize_response(request, response, *args, **kwargs)
