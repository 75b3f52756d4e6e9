import os
import smtplib
import unittest
from unittest.mock import MagicMock, patch

import requests

from raffledesk.models import Prize, RaffleEntry
from raffledesk.notify import Notifier, format_winner_message
from raffledesk.notify.clearstream import ClearstreamClient, to_e164
from raffledesk.notify.mailer import SmtpMailer


class DummyResponse:
    def __init__(self, json_data=None, status_code: int = 200, text: str = ""):
        self._json = json_data
        self.status_code = status_code
        self.text = text
        self.content = b"{}" if json_data is not None else b""

    def json(self):
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class DummySession:
    def __init__(self, response: DummyResponse):
        self.response = response
        self.calls = []

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.calls.append(
            {"method": method, "url": url, "headers": headers, "json": json, "timeout": timeout}
        )
        return self.response


class DummySms:
    def __init__(self, error: Exception = None):
        self.error = error
        self.sent = []

    def send_text(self, phone, header, body):
        if self.error is not None:
            raise self.error
        self.sent.append((phone, header, body))


class DummyMailer:
    def __init__(self, error: Exception = None):
        self.error = error
        self.sent = []

    def send(self, to_addr, subject, body):
        if self.error is not None:
            raise self.error
        self.sent.append((to_addr, subject, body))


def _entry() -> RaffleEntry:
    return RaffleEntry(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone="555-123-4567",
    )


class ToE164Tests(unittest.TestCase):
    def test_adds_country_code(self):
        self.assertEqual(to_e164("555-123-4567"), "+15551234567")

    def test_keeps_existing_country_code(self):
        self.assertEqual(to_e164("1-555-123-4567"), "+15551234567")

    def test_requires_digits(self):
        with self.assertRaises(ValueError):
            to_e164("---")


class ClearstreamClientTests(unittest.TestCase):
    @patch("raffledesk.notify.clearstream.load_dotenv")
    def test_requires_api_key(self, mock_load_dotenv):
        with patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(ValueError):
                ClearstreamClient()

    def test_send_text_posts_e164_payload(self):
        session = DummySession(DummyResponse(json_data={"data": {"id": 1}}))
        client = ClearstreamClient(
            api_key="key-123", base_url="https://sms.example.com/v1/", session=session
        )

        result = client.send_text("555-123-4567", "Raffle", "You won")

        self.assertEqual(result, {"data": {"id": 1}})
        call = session.calls[0]
        self.assertEqual(call["method"], "POST")
        self.assertEqual(call["url"], "https://sms.example.com/v1/texts")
        self.assertEqual(call["headers"]["X-Api-Key"], "key-123")
        self.assertEqual(
            call["json"],
            {"to": "+15551234567", "text_header": "Raffle", "text_body": "You won"},
        )

    def test_http_error_propagates(self):
        session = DummySession(DummyResponse(status_code=422, text="bad number"))
        client = ClearstreamClient(api_key="key", session=session)
        with self.assertRaises(requests.HTTPError):
            client.send_text("555-123-4567", "h", "b")


class SmtpMailerTests(unittest.TestCase):
    def test_requires_host(self):
        with patch("raffledesk.notify.mailer.load_dotenv"):
            with patch.dict(os.environ, {}, clear=True):
                with self.assertRaises(ValueError):
                    SmtpMailer()

    def test_build_message_headers(self):
        mailer = SmtpMailer(
            host="smtp.example.com", from_addr="raffle@example.com", from_name="Raffle Desk"
        )
        msg = mailer.build_message("ada@example.com", "Subject", "Body")
        self.assertEqual(msg["To"], "ada@example.com")
        self.assertEqual(msg["From"], "Raffle Desk <raffle@example.com>")
        self.assertIn("Body", msg.get_content())

    @patch("raffledesk.notify.mailer.smtplib.SMTP")
    def test_send_uses_starttls_and_login(self, mock_smtp):
        smtp = mock_smtp.return_value.__enter__.return_value
        mailer = SmtpMailer(
            host="smtp.example.com",
            port=2525,
            username="user",
            password="secret",
            use_ssl=False,
            from_addr="raffle@example.com",
        )

        mailer.send("ada@example.com", "Subject", "Body")

        mock_smtp.assert_called_once_with("smtp.example.com", 2525, timeout=30)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("user", "secret")
        smtp.send_message.assert_called_once()


class NotifierTests(unittest.TestCase):
    def test_format_message_mentions_prize(self):
        prize = Prize(name="Mug")
        message = format_winner_message(
            _entry(), prize, organization="Community", claim_location="the front desk"
        )
        self.assertEqual(message.subject, "Community Raffle")
        self.assertIn("Congratulations Ada!", message.body)
        self.assertIn("for the Mug", message.body)
        self.assertIn("the front desk", message.body)

    def test_format_message_without_prize(self):
        message = format_winner_message(_entry(), None)
        self.assertNotIn("for the", message.body)

    def test_both_channels_succeed(self):
        sms, mailer = DummySms(), DummyMailer()
        report = Notifier(sms, mailer, organization="Org").notify(_entry(), None)

        self.assertTrue(report.sms_ok)
        self.assertTrue(report.email_ok)
        self.assertEqual(report.errors, [])
        self.assertEqual(report.summary, "Winner notified successfully via SMS and email")
        self.assertEqual(sms.sent[0][0], "555-123-4567")
        self.assertEqual(mailer.sent[0][0], "ada@example.com")

    def test_one_channel_failing_is_still_ok(self):
        response = DummyResponse(status_code=500, text="upstream down")
        sms = DummySms(requests.HTTPError("500", response=response))
        report = Notifier(sms, DummyMailer()).notify(_entry(), None)

        self.assertTrue(report.ok)
        self.assertFalse(report.sms_ok)
        self.assertEqual(report.errors, ["SMS failed (500): upstream down"])
        self.assertEqual(report.summary, "Winner notified successfully via email only")

    def test_both_channels_failing(self):
        sms = DummySms(requests.ConnectionError("no route"))
        mailer = DummyMailer(smtplib.SMTPException("relay refused"))
        report = Notifier(sms, mailer).notify(_entry(), None)

        self.assertFalse(report.ok)
        self.assertEqual(len(report.errors), 2)
        self.assertEqual(
            report.to_json(),
            {"sms": "failed", "email": "failed", "errors": report.errors},
        )

    def test_unconfigured_channels_report_errors(self):
        report = Notifier().notify(_entry(), None)
        self.assertFalse(report.ok)
        self.assertEqual(
            report.errors,
            ["SMS failed: channel not configured", "Email failed: channel not configured"],
        )

    @patch("raffledesk.notify.mailer.load_dotenv")
    @patch("raffledesk.notify.clearstream.load_dotenv")
    def test_from_env_skips_missing_channels(self, *_mocks):
        env = {"CLEARSTREAM_API_KEY": "key"}
        with patch.dict(os.environ, env, clear=True):
            notifier = Notifier.from_env()
        self.assertIsInstance(notifier.sms_client, ClearstreamClient)
        self.assertIsNone(notifier.mailer)


if __name__ == "__main__":
    unittest.main()
