"""
Error rendering for HTTP responses

    ErrorJSON.render("404.json", {})  ->  {"errors": {"detail": "Not Found"}}
    ErrorJSON.render("500.json", {})  ->  {"errors": {"detail": "Internal Server Error"}}
"""
from http import HTTPStatus
from typing import Any, Dict, Optional


def status_message_from_template(template: str) -> str:
    """Reason phrase for a "<status>.<format>" template name"""
    code = template.split(".", 1)[0]
    try:
        return HTTPStatus(int(code)).phrase
    except ValueError:
        return HTTPStatus.INTERNAL_SERVER_ERROR.phrase


class ErrorJSON:
    @staticmethod
    def render(template: str, assigns: Optional[Dict[str, Any]] = None) -> Dict[str, Dict[str, str]]:
        return {"errors": {"detail": status_message_from_template(template)}}


class ErrorHTML:
    @staticmethod
    def render(template: str, assigns: Optional[Dict[str, Any]] = None) -> str:
        return status_message_from_template(template)
