# tests/helpers.py
from typing import Dict, List, Optional

from rss_mail_notifier.email_notifier import MailTransport, TemplateRenderer
from rss_mail_notifier.rss_client import HttpClient


def make_rss(items: List[Dict[str, str]]) -> bytes:
    """Build a small RSS 2.0 document from dicts of item fields."""
    parts = []
    for item in items:
        fields = "".join(
            f"<{tag}>{item[key]}</{tag}>"
            for key, tag in (
                ("title", "title"),
                ("link", "link"),
                ("description", "description"),
                ("pub_date", "pubDate"),
            )
            if key in item
        )
        parts.append(f"<item>{fields}</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        "<title>Board</title><link>http://bbs.example.com/</link>"
        "<description>Latest posts</description>"
        + "".join(parts)
        + "</channel></rss>"
    ).encode("utf-8")


ITEM_A = {"title": "A", "link": "http://bbs.example.com/a", "description": "first",
          "pub_date": "Mon, 01 Jan 2024 10:00:00 +0000"}
ITEM_B = {"title": "B", "link": "http://bbs.example.com/b", "description": "second",
          "pub_date": "Mon, 01 Jan 2024 11:00:00 +0000"}
ITEM_C = {"title": "C", "link": "http://bbs.example.com/c", "description": "third",
          "pub_date": "Mon, 01 Jan 2024 12:00:00 +0000"}
ITEM_D = {"title": "D", "link": "http://bbs.example.com/d", "description": "fourth",
          "pub_date": "Tue, 02 Jan 2024 09:30:00 +0000"}


class FakeHttpClient(HttpClient):
    def __init__(self, body: Optional[bytes] = None, error: Optional[Exception] = None):
        self.body = body
        self.error = error
        self.requested: List[str] = []

    def get(self, url: str) -> bytes:
        self.requested.append(url)
        if self.error is not None:
            raise self.error
        return self.body


class FakeRenderer(TemplateRenderer):
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.calls = []

    def render(self, template, context):
        self.calls.append((template, context))
        if self.error is not None:
            raise self.error
        return "<ul>" + "".join(f"<li>{i.title}</li>" for i in context["items"]) + "</ul>"


class FakeTransport(MailTransport):
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.sent = []

    def send(self, message, config):
        if self.error is not None:
            raise self.error
        self.sent.append(message)
