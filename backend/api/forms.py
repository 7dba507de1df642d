"""User form page and JSON intake endpoint

GET  /                 render the form
POST /                 parse the submitted form, re-render with the outcome
POST /api/users/parse  same pipeline for a JSON object
"""
import html
import json
from typing import Any
from urllib.parse import parse_qs

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.responses import HTMLResponse

from core.logging import api_logger
from intake import FORM_FIELDS, SubmissionOutcome, UserForm

router = APIRouter()

log = api_logger()

_PLACEHOLDERS = {
    "userId": "user id",
    "userName": "user name",
    "userEmail": "user email",
    "userCreatedAt": "user createdAt",
    "userUpdatedAt": "user updatedAt",
}


def get_user_form(request: Request) -> UserForm:
    return request.app.state.user_form


async def _parse_urlencoded(request: Request) -> dict[str, str]:
    body_bytes = await request.body()
    content_type = request.headers.get("content-type", "")
    charset = "utf-8"
    if "charset=" in content_type:
        charset = content_type.split("charset=", 1)[1].split(";", 1)[0].strip() or "utf-8"
    try:
        decoded = body_bytes.decode(charset)
    except (LookupError, UnicodeDecodeError):
        decoded = body_bytes.decode("utf-8", errors="replace")
    data = parse_qs(decoded, keep_blank_values=True)
    return {name: values[0] for name, values in data.items() if name in FORM_FIELDS}


def _render_outcome(outcome: SubmissionOutcome | None) -> str:
    if outcome is None:
        return ""
    if outcome.ok:
        record = json.dumps(outcome.record.to_dict(mode="json"), indent=2)
        return (
            '<section class="result result--ok">'
            "<h2>Parsed user data</h2>"
            f"<pre>{html.escape(record)}</pre>"
            "</section>"
        )
    record_level = outcome.issues_by_field().get("$", [])
    items = "".join(f"<li>{html.escape(d.message)}</li>" for d in record_level)
    count = len(outcome.error.details)
    return (
        '<section class="result result--error">'
        f"<h2>Validation errors ({count})</h2>"
        f"{f'<ul>{items}</ul>' if items else ''}"
        "</section>"
    )


def render_page(values: dict[str, str] | None = None, outcome: SubmissionOutcome | None = None) -> str:
    values = values or {}
    issues = outcome.issues_by_field() if outcome is not None else {}

    inputs = []
    for name, key in FORM_FIELDS.items():
        value = html.escape(values.get(name) or "", quote=True)
        field_issues = "".join(
            f'<span class="field__error" data-constraint="{html.escape(d.constraint)}">{html.escape(d.message)}</span>'
            for d in issues.get(key, [])
        )
        inputs.append(
            f'<label class="field" for="{name}">'
            f'<input type="text" id="{name}" name="{name}" placeholder="{_PLACEHOLDERS[name]}" value="{value}" />'
            f"{field_issues}"
            "</label>"
        )

    form = (
        '<form method="post" action="/">\n'
        + "\n".join(inputs)
        + '\n<button type="submit">click to parse</button>\n</form>'
    )

    return (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\">\n"
        "  <head>\n"
        "    <meta charset=\"utf-8\" />\n"
        "    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />\n"
        "    <title>User form</title>\n"
        "  </head>\n"
        "  <body>\n"
        "    <main class=\"page\">\n"
        f"{form}\n"
        f"{_render_outcome(outcome)}\n"
        "    </main>\n"
        "    <footer class=\"footer\"></footer>\n"
        "  </body>\n"
        "</html>\n"
    )


@router.get("/", response_class=HTMLResponse, name="user_form")
async def show_form():
    return HTMLResponse(render_page())


@router.post("/", response_class=HTMLResponse, name="user_form_submit")
async def submit_form(request: Request, user_form: UserForm = Depends(get_user_form)):
    values = await _parse_urlencoded(request)
    outcome = await user_form.submit_async(values)
    code = status.HTTP_200_OK if outcome.ok else status.HTTP_400_BAD_REQUEST
    return HTMLResponse(render_page(values, outcome), status_code=code)


@router.post("/api/users/parse", name="user_parse")
async def parse_user(
    payload: dict[str, Any] = Body(...),
    user_form: UserForm = Depends(get_user_form),
):
    """Parse a JSON object through the same intake pipeline as the form."""
    outcome = await user_form.submit_async(payload)
    if not outcome.ok:
        # Rendered by the ValidationError handler as a structured 400
        raise outcome.error
    log.debug("user_parse_succeeded", submission_id=outcome.submission_id)
    return {
        "status": outcome.state.value,
        "submission_id": outcome.submission_id,
        "user": outcome.record.to_dict(mode="json"),
    }
