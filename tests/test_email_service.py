from urllib.parse import unquote

from orderslip.config import get_config, set_config_for_test
from orderslip.models.order_models import EmailDraft
from orderslip.services import email_service


class _FakeResponse:
    def __init__(self, text):
        self.text = text


class _FakeModel:
    reply = ""

    def __init__(self, model_name):
        self.model_name = model_name

    def generate_content(self, prompt, **kwargs):
        return _FakeResponse(self.reply)


def _with_api_key(monkeypatch, reply):
    set_config_for_test(data_dir=get_config().data_dir, gemini_api_key="test-key")
    monkeypatch.setattr(email_service.genai, "configure", lambda **kwargs: None)
    monkeypatch.setattr(_FakeModel, "reply", reply)
    monkeypatch.setattr(email_service.genai, "GenerativeModel", _FakeModel)


def test_fallback_without_api_key(order_factory):
    draft = email_service.draft_email(order_factory())

    assert draft == EmailDraft(
        subject="[Shipment Notice] Main St Store - 2024-05-01",
        body="Hello, attached is your order summary. Total: 20.",
        generated=False,
    )


def test_generated_draft(monkeypatch, order_factory):
    _with_api_key(monkeypatch, '{"subject": "Shipment on 2024-05-01", "body": "Thank you for your order."}')

    draft = email_service.draft_email(order_factory())

    assert draft.generated is True
    assert draft.subject == "Shipment on 2024-05-01"
    assert draft.body == "Thank you for your order."


def test_malformed_reply_falls_back(monkeypatch, order_factory):
    _with_api_key(monkeypatch, "Sure! Here is your email.")

    assert email_service.draft_email(order_factory()).generated is False


def test_incomplete_reply_falls_back(monkeypatch, order_factory):
    _with_api_key(monkeypatch, '{"subject": "Hi"}')

    assert email_service.draft_email(order_factory()) == email_service.fallback_draft(order_factory())


def test_generation_error_falls_back(monkeypatch, order_factory):
    _with_api_key(monkeypatch, "")

    def broken_model(model_name):
        raise RuntimeError("quota exceeded")

    monkeypatch.setattr(email_service.genai, "GenerativeModel", broken_model)

    assert email_service.draft_email(order_factory()).generated is False


def test_mailto_url(order_factory):
    order = order_factory()
    draft = EmailDraft(subject="Shipment & invoice", body="Hello there")

    url = email_service.build_mailto_url(order, draft)

    assert url.startswith("mailto:store@example.com?subject=Shipment%20%26%20invoice&body=")
    body = unquote(url.split("&body=", 1)[1])
    assert body.startswith("Hello there\n\n")
    assert "attach the PDF" in body
