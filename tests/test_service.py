import random
import unittest
from unittest.mock import patch

from raffledesk.auth import create_admin
from raffledesk.db.engine import get_sessionmaker, make_engine
from raffledesk.models import Base
from raffledesk.notify import NotificationReport
from raffledesk.service import RaffleService
from raffledesk.store import RecordStore


class DummyNotifier:
    def __init__(self, report: NotificationReport):
        self.report = report

    def notify(self, entry, prize):
        return self.report


ENTRY = {
    "first_name": "Ada",
    "last_name": "Lovelace",
    "email": "ada@example.com",
    "phone": "555-123-4567",
}


class RaffleServiceTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = get_sessionmaker(self.engine)
        self.notifier = DummyNotifier(NotificationReport(sms_ok=True, email_ok=True))
        self.service = RaffleService(
            self.Session, notifier=self.notifier, rng=random.Random(3)
        )

    def tearDown(self):
        self.engine.dispose()

    def _confirmed_winner_id(self) -> int:
        entry = self.service.submit_entry(ENTRY).data
        return self.service.confirm_winner(entry["id"]).data["id"]


class EntryServiceTests(RaffleServiceTestCase):
    def test_submit_entry_returns_serialized_entry(self):
        response = self.service.submit_entry({**ENTRY, "phone": "5551234567"})
        self.assertTrue(response.ok)
        self.assertEqual(response.status, 200)
        self.assertEqual(response.data["phone"], "555-123-4567")
        self.assertFalse(response.data["has_won"])

    def test_duplicate_submission_is_a_conflict(self):
        self.service.submit_entry(ENTRY)
        response = self.service.submit_entry(ENTRY)
        self.assertFalse(response.ok)
        self.assertEqual(response.status, 409)
        self.assertEqual(len(self.service.list_entries().data), 1)

    def test_validation_failure_carries_field_errors(self):
        response = self.service.submit_entry({**ENTRY, "email": "nope"})
        self.assertEqual(response.status, 400)
        self.assertIn("email", response.errors)
        self.assertEqual(response.to_json()["message"], "Validation error")

    def test_bulk_delete_requires_exact_token(self):
        self.service.submit_entry(ENTRY)
        rejected = self.service.delete_all_entries("delete all")
        self.assertEqual(rejected.status, 400)
        self.assertEqual(len(self.service.list_entries().data), 1)

        accepted = self.service.delete_all_entries("DELETE ALL")
        self.assertTrue(accepted.ok)
        self.assertEqual(accepted.data, {"deleted": 1})
        self.assertEqual(self.service.list_entries().data, [])

    def test_delete_missing_entry_is_not_found(self):
        response = self.service.delete_entry(99)
        self.assertEqual(response.status, 404)


class DrawServiceTests(RaffleServiceTestCase):
    def test_draw_on_empty_pool(self):
        response = self.service.draw_winner()
        self.assertFalse(response.ok)
        self.assertEqual(response.status, 400)
        self.assertEqual(response.message, "No eligible entries available for drawing")

    def test_confirm_requires_entry_id(self):
        response = self.service.confirm_winner(None)
        self.assertEqual(response.status, 400)
        self.assertIn("entry_id", response.errors)

    def test_full_flow(self):
        for first in ("A", "B", "C"):
            self.service.submit_entry({**ENTRY, "first_name": first})
        prize = self.service.create_prize({"name": "P1"}).data

        drawn = self.service.draw_winner().data
        winner = self.service.confirm_winner(drawn["id"]).data
        self.assertEqual(winner["status"], "confirmed")
        self.assertEqual(winner["entry"]["id"], drawn["id"])

        claimed = self.service.claim_prize(winner["id"], prize["id"])
        self.assertTrue(claimed.ok)
        self.assertEqual(claimed.data["prize"]["name"], "P1")
        self.assertIsNotNone(claimed.data["claimed_at"])
        self.assertFalse(self.service.list_prizes().data[0]["is_available"])

        again = self.service.claim_prize(winner["id"], prize["id"])
        self.assertEqual(again.status, 409)

        second = self.service.confirm_winner(self.service.draw_winner().data["id"]).data
        no_show = self.service.mark_no_show(second["id"])
        self.assertTrue(no_show.data["is_no_show"])

        statuses = [e["status"] for e in self.service.list_entries().data]
        self.assertEqual(statuses.count("eligible"), 2)
        self.assertEqual(len(self.service.list_winners().data), 2)

    def test_delete_prize_keeps_winner(self):
        winner_id = self._confirmed_winner_id()
        prize = self.service.create_prize({"name": "Mug"}).data
        self.service.claim_prize(winner_id, prize["id"])

        response = self.service.delete_prize(prize["id"])
        self.assertTrue(response.ok)
        self.assertEqual(response.message, "Prize deleted successfully")

        (winner,) = self.service.list_winners().data
        self.assertIsNone(winner["prize_id"])
        self.assertEqual(winner["status"], "confirmed")


class NotifyServiceTests(RaffleServiceTestCase):
    def test_notify_success(self):
        winner_id = self._confirmed_winner_id()
        response = self.service.notify_winner(winner_id)
        self.assertTrue(response.ok)
        self.assertEqual(
            response.data["message"], "Winner notified successfully via SMS and email"
        )
        (winner,) = self.service.list_winners().data
        self.assertIsNotNone(winner["notified_at"])

    def test_notify_failure_is_reported_without_state_change(self):
        self.notifier.report = NotificationReport(errors=["SMS failed: x", "Email failed: y"])
        winner_id = self._confirmed_winner_id()

        response = self.service.notify_winner(winner_id)

        self.assertFalse(response.ok)
        self.assertEqual(response.status, 502)
        self.assertEqual(response.errors, ["SMS failed: x", "Email failed: y"])
        (winner,) = self.service.list_winners().data
        self.assertIsNone(winner["notified_at"])


class BoundaryTests(RaffleServiceTestCase):
    def test_unexpected_error_becomes_500(self):
        with patch(
            "raffledesk.service.workflows.list_prizes", side_effect=RuntimeError("boom")
        ):
            with self.assertLogs("raffledesk.service", level="ERROR"):
                response = self.service.list_prizes()
        self.assertFalse(response.ok)
        self.assertEqual(response.status, 500)
        self.assertEqual(response.message, "Failed to fetch prizes")

    def test_failed_operation_rolls_back(self):
        self.service.submit_entry(ENTRY)
        original = RecordStore.delete_all_entries

        def _fail_after_delete(store):
            original(store)
            raise RuntimeError("disk full")

        with patch.object(RecordStore, "delete_all_entries", _fail_after_delete):
            with self.assertLogs("raffledesk.service", level="ERROR"):
                response = self.service.delete_all_entries("DELETE ALL")
        self.assertEqual(response.status, 500)
        self.assertEqual(len(self.service.list_entries().data), 1)

    def test_login_and_authorize(self):
        with self.Session.begin() as session:
            create_admin(session, "admin@example.com", "s3cret")

        denied = self.service.login("admin@example.com", "nope")
        self.assertEqual(denied.status, 401)

        token = self.service.login("admin@example.com", "s3cret").data["token"]
        self.assertTrue(self.service.authorize(token).ok)

        self.assertTrue(self.service.logout(token).ok)
        self.assertEqual(self.service.authorize(token).status, 401)


if __name__ == "__main__":
    unittest.main()
