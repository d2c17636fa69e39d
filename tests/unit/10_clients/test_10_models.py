"""Tests for wire record serialization."""

import base64

from sendlix.models import (
    AdditionalInfos,
    AttachmentData,
    EmailData,
    EmlMail,
    GroupResponseData,
    InlineImageData,
    MailContent,
    MailContentType,
    MailData,
    SendEmailResponseData,
    Timestamp,
)


def test_mail_data_uses_wire_names_and_omits_unset_fields():
    mail = MailData(
        sender=EmailData(email="from@example.com"),
        to=[EmailData(email="to@example.com", name="To")],
        reply_to=EmailData(email="reply@example.com"),
        subject="Hi",
        content=MailContent(value="<p>hi</p>", type=MailContentType.HTML),
    )

    assert mail.to_wire() == {
        "from": {"email": "from@example.com"},
        "to": [{"email": "to@example.com", "name": "To"}],
        "replyTo": {"email": "reply@example.com"},
        "subject": "Hi",
        "content": {"value": "<p>hi</p>", "type": "HTML", "tracking": False},
    }


def test_additional_infos_wire_names():
    infos = AdditionalInfos(
        attachments=[AttachmentData(content_url="https://x/y.pdf", filename="y.pdf", type="application/pdf")],
        category="news",
        send_at=Timestamp(seconds=10),
    )
    assert infos.to_wire() == {
        "attachments": [{"contentUrl": "https://x/y.pdf", "filename": "y.pdf", "type": "application/pdf"}],
        "category": "news",
        "sendAt": {"seconds": 10},
    }


def test_bytes_are_base64_encoded():
    assert EmlMail(mail=b"Subject: hi\r\n\r\nbody").to_wire() == {
        "mail": base64.b64encode(b"Subject: hi\r\n\r\nbody").decode(),
    }
    image = InlineImageData(cid="logo", content_type="image/png", data=b"\x89PNG")
    assert image.to_wire()["data"] == base64.b64encode(b"\x89PNG").decode()
    assert image.to_wire()["contentType"] == "image/png"


def test_responses_ignore_unknown_fields():
    response = SendEmailResponseData.model_validate({"message": ["m1"], "emailsLeft": 3, "extra": 1})
    assert response.message == ["m1"]
    assert response.emails_left == 3


def test_group_response_defaults_to_failure():
    assert GroupResponseData.model_validate({}).success is False
