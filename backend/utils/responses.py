from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success(data: dict | None = None, message: str | None = None, status_code: int = 200):
    """
    Success envelope: {"status": "success", "message"?, "data"?}
    """
    body = {"status": "success"}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data

    if status_code == 200:
        return body
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))
