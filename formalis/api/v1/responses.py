"""
Conversion des résultats d'action en réponses HTTP.

| ErrorKind        | Mutation | Lecture |
|------------------|----------|---------|
| authentication   | 401      | 401     |
| authorization    | 403      | 403     |
| validation       | 422      | 422     |
| not_found        | 404      | 404     |
| conflict         | 409      | 409     |
| storage          | 500      | 200 (champ `error` renseigné) |
| upstream         | 502      | 502     |
"""

from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

from formalis.core.results import DeleteResult, ErrorKind, ListResult, MutationResult

STATUS_BY_KIND = {
    ErrorKind.AUTHENTICATION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTHORIZATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.VALIDATION: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.STORAGE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.UPSTREAM: status.HTTP_502_BAD_GATEWAY,
}


def _status_for(kind: Optional[ErrorKind], success_status: int) -> int:
    if kind is None:
        return success_status
    return STATUS_BY_KIND[kind]


def list_response(result: ListResult) -> JSONResponse:
    """{data, count, error} ; une erreur de stockage reste en 200."""
    if result.kind == ErrorKind.STORAGE:
        status_code = status.HTTP_200_OK
    else:
        status_code = _status_for(result.kind, status.HTTP_200_OK)
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))


def mutation_response(result: MutationResult, success_status: int = status.HTTP_200_OK) -> JSONResponse:
    """{data} ou {error: {champ: [messages]}}."""
    if result.ok:
        content = {"data": result.model_dump(mode="json")["data"]}
    else:
        content = {"error": result.error}
    return JSONResponse(status_code=_status_for(result.kind, success_status), content=content)


def delete_response(result: DeleteResult) -> JSONResponse:
    """{success: true} ou {error: message}."""
    if result.ok:
        content = {"success": True}
    else:
        content = {"error": result.error}
    return JSONResponse(status_code=_status_for(result.kind, status.HTTP_200_OK), content=content)
