import asyncio
import base64

import fakeredis
import fakeredis.aioredis
import pytest

from gymdesk.core.exceptions import NotFound, TerminalAuthError
from gymdesk.services.tap_cooldown import is_duplicate_and_record_tap
from gymdesk.services.terminal_service import create_terminal, ping, validate_terminal


def b64(value: str) -> str:
    return base64.b64encode(value.encode()).decode()


class TestTerminalAuth:
    def test_valid_secret_touches_last_seen(self, db, make, now):
        terminal = make.terminal(make.branch(make.tenant()), secret="kiosk-secret")

        assert validate_terminal(db, terminal.id, b64("kiosk-secret"), now).id == terminal.id
        db.refresh(terminal)
        assert terminal.last_seen_at == now

    @pytest.mark.parametrize("secret", [b64("wrong"), "%%%not-base64%%%"])
    def test_bad_secret(self, db, make, now, secret):
        terminal = make.terminal(make.branch(make.tenant()))
        with pytest.raises(TerminalAuthError):
            validate_terminal(db, terminal.id, secret, now)

    def test_unknown_terminal(self, db, now):
        with pytest.raises(TerminalAuthError):
            validate_terminal(db, 77, b64("kiosk-secret"), now)

    def test_created_secret_validates(self, db, make, now):
        branch = make.branch(make.tenant(), "Ortigas")
        terminal, secret = create_terminal(db, branch.id, "Turnstile")

        assert secret not in terminal.secret_hash
        assert validate_terminal(db, terminal.id, b64(secret), now).id == terminal.id
        assert ping(db, terminal)["branch_name"] == "Ortigas"

    def test_create_for_other_tenant_branch(self, db, make):
        branch = make.branch(make.tenant())
        with pytest.raises(NotFound):
            create_terminal(db, branch.id, "Turnstile", tenant_id=branch.tenant_id + 100)


class TestTapCooldown:
    def run(self, *taps, cooldown_ms=3000):
        """Feed (terminal_id, card_uid, now_ms) taps through one fake Redis"""

        async def go():
            r = fakeredis.aioredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True)
            return [await is_duplicate_and_record_tap(r, t, uid, cooldown_ms=cooldown_ms, now_ms=ms)
                    for t, uid, ms in taps]

        return asyncio.run(go())

    def test_second_tap_within_cooldown(self):
        assert self.run((1, "A", 1000), (1, "A", 2500)) == [False, True]

    def test_tap_after_cooldown(self):
        assert self.run((1, "A", 1000), (1, "A", 4000)) == [False, False]

    def test_holding_card_keeps_suppressing(self):
        assert self.run((1, "A", 0), (1, "A", 2000), (1, "A", 4000), (1, "A", 7500)) == [False, True, True, False]

    def test_other_terminal_or_card_independent(self):
        assert self.run((1, "A", 1000), (2, "A", 1100), (1, "B", 1200)) == [False, False, False]

    def test_clock_going_backwards_is_not_duplicate(self):
        assert self.run((1, "A", 5000), (1, "A", 4000)) == [False, False]
