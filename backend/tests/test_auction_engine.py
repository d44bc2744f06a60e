from datetime import timedelta
from decimal import Decimal

import pytest

from app.core.config import settings
from app.core.errors import (
    ImpermissibleState,
    InsufficientFunds,
    InvalidBid,
    InvalidState,
    NotFound,
    TeamFull,
)
from app.services import auction_engine as engine
from conftest import T0, make_player, make_user


def _open_auction(store, starting_price="5000", hours=24):
    player = make_player(store)
    auction = engine.create_auction(store, player.id, Decimal(starting_price), hours, now=T0)
    return player, auction


class TestPlaceBid:
    def test_bid_sets_price_and_leader(self, store):
        _, auction = _open_auction(store)
        bidder = make_user(store)

        bid = engine.place_bid(store, bidder.id, auction.id, Decimal("5500"), now=T0 + timedelta(hours=1))

        assert bid.amount == Decimal("5500")
        assert bid.user_id == bidder.id
        updated = store.get_auction(auction.id)
        assert updated.current_price == Decimal("5500")
        assert updated.current_winner_id == bidder.id
        assert [b.id for b in store.list_bids_by_auction(auction.id)] == [bid.id]

    def test_bid_does_not_touch_balance(self, store):
        _, auction = _open_auction(store)
        bidder = make_user(store, balance="10000")

        engine.place_bid(store, bidder.id, auction.id, 6000, now=T0)

        assert store.get_user(bidder.id).balance == Decimal("10000")

    @pytest.mark.parametrize("amount", ["8750", "8000"])
    def test_bid_not_above_current_price_rejected(self, store, amount):
        _, auction = _open_auction(store, starting_price="8750")
        bidder = make_user(store)

        with pytest.raises(InvalidBid):
            engine.place_bid(store, bidder.id, auction.id, Decimal(amount), now=T0)

        assert store.get_auction(auction.id).current_price == Decimal("8750")
        assert store.list_bids_by_auction(auction.id) == []

    def test_insufficient_funds(self, store):
        _, auction = _open_auction(store, starting_price="1000")
        poor = make_user(store, balance="3000")

        with pytest.raises(InsufficientFunds):
            engine.place_bid(store, poor.id, auction.id, Decimal("5000"), now=T0)

    def test_unknown_bidder_counts_as_insufficient_funds(self, store):
        _, auction = _open_auction(store)

        with pytest.raises(InsufficientFunds):
            engine.place_bid(store, 999, auction.id, Decimal("6000"), now=T0)

    def test_unknown_auction(self, store):
        bidder = make_user(store)

        with pytest.raises(NotFound) as exc:
            engine.place_bid(store, bidder.id, 42, Decimal("6000"), now=T0)
        assert exc.value.entity == "Auction"
        assert exc.value.status_code == 404

    def test_completed_auction_rejects_bids(self, store):
        _, auction = _open_auction(store)
        bidder = make_user(store)
        engine.end_auction(store, auction.id)

        with pytest.raises(InvalidState, match="not active"):
            engine.place_bid(store, bidder.id, auction.id, Decimal("6000"), now=T0)

    def test_bid_after_end_time_rejected(self, store):
        _, auction = _open_auction(store, hours=2)
        bidder = make_user(store)

        with pytest.raises(InvalidState, match="ended"):
            engine.place_bid(store, bidder.id, auction.id, Decimal("6000"), now=T0 + timedelta(hours=2))

        # sigue activa: nadie la cierra automáticamente
        assert store.get_auction(auction.id).status == "active"

    def test_first_failed_check_wins(self, store):
        _, auction = _open_auction(store, hours=1)
        poor = make_user(store, balance="10")

        # acabada + puja baja + sin saldo: se informa de lo primero
        with pytest.raises(InvalidState):
            engine.place_bid(store, poor.id, auction.id, Decimal("1"), now=T0 + timedelta(hours=3))

    def test_full_team_cannot_bid(self, store):
        _, auction = _open_auction(store)
        bidder = make_user(store)
        for i in range(5):
            make_player(store, username=f"owned{i}", owner_id=bidder.id)

        with pytest.raises(TeamFull):
            engine.place_bid(store, bidder.id, auction.id, Decimal("6000"), now=T0)

    def test_minimum_increment_when_configured(self, store, monkeypatch):
        monkeypatch.setattr(settings, "MIN_BID_INCREMENT_PCT", Decimal("5"))
        _, auction = _open_auction(store)
        bidder = make_user(store)

        with pytest.raises(InvalidBid, match="5250"):
            engine.place_bid(store, bidder.id, auction.id, Decimal("5200"), now=T0)

        engine.place_bid(store, bidder.id, auction.id, Decimal("5250"), now=T0)
        assert store.get_auction(auction.id).current_price == Decimal("5250")

    def test_no_minimum_increment_by_default(self, store):
        _, auction = _open_auction(store)
        bidder = make_user(store)

        engine.place_bid(store, bidder.id, auction.id, Decimal("5000.01"), now=T0)

        assert store.get_auction(auction.id).current_price == Decimal("5000.01")


class TestEndAuction:
    def test_settles_with_winner(self, store):
        player, auction = _open_auction(store)
        winner = make_user(store, balance="20000")
        engine.place_bid(store, winner.id, auction.id, Decimal("7000"), now=T0)

        ended = engine.end_auction(store, auction.id)

        assert ended.status == "completed"
        assert store.get_user(winner.id).balance == Decimal("13000")
        p = store.get_player(player.id)
        assert p.owner_id == winner.id
        assert p.available_for_auction is False
        assert p.is_released is False

    def test_second_end_is_rejected_without_double_debit(self, store):
        player, auction = _open_auction(store)
        winner = make_user(store, balance="20000")
        engine.place_bid(store, winner.id, auction.id, Decimal("7000"), now=T0)
        engine.end_auction(store, auction.id)

        with pytest.raises(InvalidState):
            engine.end_auction(store, auction.id)

        assert store.get_user(winner.id).balance == Decimal("13000")
        assert store.get_player(player.id).owner_id == winner.id

    def test_no_bids_leaves_player_free(self, store):
        player, auction = _open_auction(store)
        bystander = make_user(store)

        ended = engine.end_auction(store, auction.id)

        assert ended.status == "completed"
        assert ended.current_winner_id is None
        p = store.get_player(player.id)
        assert p.owner_id is None
        assert p.available_for_auction is True
        assert store.get_user(bystander.id).balance == Decimal("25000")

    def test_winner_short_of_funds_completes_without_transfer(self, store):
        player, auction = _open_auction(store)
        winner = make_user(store, balance="8000")
        engine.place_bid(store, winner.id, auction.id, Decimal("7000"), now=T0)

        # gasta el dinero en otra subasta antes del cierre
        assert store.debit_balance(winner.id, Decimal("5000"))

        ended = engine.end_auction(store, auction.id)

        assert ended.status == "completed"
        assert store.get_user(winner.id).balance == Decimal("3000")
        p = store.get_player(player.id)
        assert p.owner_id is None
        assert p.available_for_auction is True

    def test_winner_with_full_roster_gets_nothing(self, store):
        player, auction = _open_auction(store)
        winner = make_user(store)
        engine.place_bid(store, winner.id, auction.id, Decimal("6000"), now=T0)
        for i in range(5):
            make_player(store, username=f"won{i}", owner_id=winner.id)

        engine.end_auction(store, auction.id)

        assert store.get_user(winner.id).balance == Decimal("25000")
        assert store.get_player(player.id).owner_id is None

    def test_player_owned_elsewhere_is_not_sold_again(self, store):
        player, auction = _open_auction(store)
        first_owner = make_user(store, username="first")
        winner = make_user(store, username="late", balance="20000")
        engine.place_bid(store, winner.id, auction.id, Decimal("7000"), now=T0)
        assert store.claim_player(player.id, first_owner.id)

        ended = engine.end_auction(store, auction.id)

        assert ended.status == "completed"
        assert store.get_player(player.id).owner_id == first_owner.id
        assert store.get_user(winner.id).balance == Decimal("20000")

    def test_unknown_auction(self, store):
        with pytest.raises(NotFound):
            engine.end_auction(store, 7)


class TestCreateAuction:
    def test_creates_active_auction(self, store):
        player = make_player(store, available_for_auction=False)

        auction = engine.create_auction(store, player.id, Decimal("5000"), 24, now=T0)

        assert auction.status == "active"
        assert auction.starting_price == Decimal("5000")
        assert auction.current_price == Decimal("5000")
        assert auction.current_winner_id is None
        assert auction.start_time == T0
        assert auction.end_time == T0 + timedelta(hours=24)
        assert store.get_player(player.id).available_for_auction is True

    def test_owned_player_rejected(self, store):
        owner = make_user(store)
        player = make_player(store, owner_id=owner.id)

        with pytest.raises(ImpermissibleState, match="not available"):
            engine.create_auction(store, player.id, Decimal("5000"), 24, now=T0)
        assert store.list_auctions() == []

    def test_player_already_listed_rejected(self, store):
        player, _ = _open_auction(store)

        with pytest.raises(ImpermissibleState):
            engine.create_auction(store, player.id, Decimal("5000"), 24, now=T0)

    def test_relist_after_unsold(self, store):
        player, first = _open_auction(store)
        engine.end_auction(store, first.id)

        second = engine.create_auction(store, player.id, Decimal("4000"), 12, now=T0)

        assert second.id != first.id
        assert second.status == "active"

    def test_missing_player(self, store):
        with pytest.raises(NotFound):
            engine.create_auction(store, 123, Decimal("5000"), 24, now=T0)

    def test_missing_player_reported_before_bad_values(self, store):
        with pytest.raises(NotFound):
            engine.create_auction(store, 123, Decimal("0"), 0, now=T0)

    def test_non_positive_values_rejected(self, store):
        player = make_player(store)

        with pytest.raises(InvalidState):
            engine.create_auction(store, player.id, Decimal("0"), 24, now=T0)
        with pytest.raises(InvalidState):
            engine.create_auction(store, player.id, Decimal("5000"), 0, now=T0)


class TestReleaseAndFunds:
    def test_release_clears_owner(self, store):
        owner = make_user(store)
        player = make_player(store, owner_id=owner.id)

        released = engine.release_player(store, player.id)

        assert released.owner_id is None
        assert released.is_released is True
        assert store.list_players_by_owner(owner.id) == []
        assert store.list_auctions() == []

    def test_release_missing_player(self, store):
        with pytest.raises(NotFound):
            engine.release_player(store, 99)

    def test_add_funds(self, store):
        user = make_user(store, balance="1000")

        updated = engine.add_funds(store, user.id, Decimal("2500.50"))

        assert updated.balance == Decimal("3500.50")
        assert store.get_user(user.id).balance == Decimal("3500.50")

    def test_add_funds_validation(self, store):
        user = make_user(store)
        with pytest.raises(InvalidState):
            engine.add_funds(store, user.id, Decimal("-5"))
        with pytest.raises(NotFound):
            engine.add_funds(store, 404, Decimal("5"))


class TestLifecycle:
    def test_live_and_expired_views(self, store):
        _, short = _open_auction(store, hours=1)
        long_player = make_player(store, username="StrategyQueen")
        long = engine.create_auction(store, long_player.id, Decimal("3000"), 48, now=T0)

        later = T0 + timedelta(hours=2)
        assert [a.id for a in engine.list_live_auctions(store, later)] == [long.id]
        assert engine.has_ended(store.get_auction(short.id), later)
        assert not engine.is_live(store.get_auction(short.id), later)
        assert engine.is_live(store.get_auction(long.id), later)

    def test_settle_expired_only_touches_ended_auctions(self, store):
        short_player, short = _open_auction(store, hours=1)
        long_player = make_player(store, username="StrategyQueen")
        long = engine.create_auction(store, long_player.id, Decimal("3000"), 48, now=T0)
        bidder = make_user(store)
        engine.place_bid(store, bidder.id, short.id, Decimal("5100"), now=T0)

        settled = engine.settle_expired_auctions(store, now=T0 + timedelta(hours=2))

        assert [a.id for a in settled] == [short.id]
        assert store.get_auction(long.id).status == "active"
        assert store.get_player(short_player.id).owner_id == bidder.id
        assert engine.settle_expired_auctions(store, now=T0 + timedelta(hours=2)) == []

    def test_settle_keeps_going_after_a_failing_auction(self, store, monkeypatch):
        broken_player, broken = _open_auction(store, hours=1)
        fine_player = make_player(store, username="StrategyQueen")
        fine = engine.create_auction(store, fine_player.id, Decimal("3000"), 1, now=T0)
        bidder = make_user(store, balance="20000")
        engine.place_bid(store, bidder.id, broken.id, Decimal("6000"), now=T0)
        engine.place_bid(store, bidder.id, fine.id, Decimal("4000"), now=T0)

        # la ficha del primer jugador ya no se puede leer al liquidar
        real_get_player = store.get_player
        monkeypatch.setattr(
            store,
            "get_player",
            lambda player_id: None if player_id == broken_player.id else real_get_player(player_id),
        )

        settled = engine.settle_expired_auctions(store, now=T0 + timedelta(hours=2))

        assert [a.id for a in settled] == [fine.id]
        assert store.get_auction(broken.id).status == "active"
        assert real_get_player(fine_player.id).owner_id == bidder.id
        assert store.get_user(bidder.id).balance == Decimal("16000")


def test_end_to_end_scenario(store):
    player = make_player(store)
    team_a = make_user(store, username="team_a")
    team_b = make_user(store, username="team_b")

    auction = engine.create_auction(store, player.id, Decimal("5000"), 24, now=T0)
    engine.place_bid(store, team_a.id, auction.id, Decimal("5200"), now=T0 + timedelta(minutes=5))
    with pytest.raises(InvalidBid):
        engine.place_bid(store, team_b.id, auction.id, Decimal("5100"), now=T0 + timedelta(minutes=6))
    engine.place_bid(store, team_a.id, auction.id, Decimal("6000"), now=T0 + timedelta(minutes=7))

    ended = engine.end_auction(store, auction.id)

    assert ended.status == "completed"
    assert store.get_player(player.id).owner_id == team_a.id
    assert store.get_user(team_a.id).balance == Decimal("19000")
    assert store.get_user(team_b.id).balance == Decimal("25000")
    assert [b.amount for b in store.list_bids_by_auction(auction.id)] == [Decimal("5200"), Decimal("6000")]
