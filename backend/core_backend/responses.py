from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data=None, message="", status=http_status.HTTP_200_OK, **extra):
    """Success side of the response envelope shared by every endpoint."""
    body = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    body.update(extra)
    return Response(body, status=status)
