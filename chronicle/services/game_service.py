"""
chronicle.services.game_service — Game Lifecycle Replay
========================================================

Replays one channel's messages through the game state machine::

    hint pass ─▶ (bot only) classify each embed ─▶ dispatch on MessageKind

The hint pass harvests every display name a message exposes (slash-command
invoker, mentions, reactors, human authors) before any narrative is
interpreted, so mentions in the same message can already resolve.

Lifecycle data that arrives while no game is running is handled two ways:

* **Leftover** — the channel has not shown a countdown yet; the archives
  simply start mid-game.  Logged and skipped.
* **Inconsistent** — a game *was* followed but is not running.  The archive
  is out of order or the bot changed its format; the run is aborted with
  :class:`~chronicle.errors.InconsistentState`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from chronicle.database.models import Game, Round
from chronicle.engine.classifier import EmbedRule, MessageKind, classify_embed
from chronicle.engine.parsing import (
    is_event_round,
    parse_era,
    parse_event_round,
    parse_host,
    parse_prize,
    parse_round_lines,
    parse_round_number,
    parse_xp_multiplier,
)
from chronicle.engine.state import ChannelContext, Phase
from chronicle.engine.text import unescape_markdown
from chronicle.errors import InconsistentState
from chronicle.exports.schema import Embed, ExportMessage
from chronicle.services.identity_service import IdentityResolver
from chronicle.services.interaction_service import InteractionRecorder

logger = logging.getLogger(__name__)

Handler = Callable[[ChannelContext, ExportMessage, Embed], None]


# ---------------------------------------------------------------------------
# Game IDs
# ---------------------------------------------------------------------------
class GameIdAllocator:
    """Hands out game IDs continuing from the highest one already stored."""

    def __init__(self, last_id: int = 0) -> None:
        self.last_id = last_id

    @classmethod
    def from_session(cls, session: Session) -> GameIdAllocator:
        return cls(session.scalar(select(func.max(Game.id))) or 0)

    def next_id(self) -> int:
        self.last_id += 1
        return self.last_id


# ---------------------------------------------------------------------------
# Tracker
# ---------------------------------------------------------------------------
class GameTracker:
    """Interprets bot messages and writes games, rounds and interactions."""

    def __init__(
        self,
        session: Session,
        bot_author_id: str,
        allocator: GameIdAllocator | None = None,
    ) -> None:
        self.session = session
        self.bot_author_id = bot_author_id
        self.allocator = allocator or GameIdAllocator.from_session(session)
        self.resolver = IdentityResolver(session)
        self.recorder = InteractionRecorder(session, self.resolver)
        self._handlers: dict[MessageKind, Handler] = {
            MessageKind.COUNTDOWN: self._on_countdown,
            MessageKind.COUNTDOWN_TICK: self._on_nothing,
            MessageKind.GAME_START: self._on_start,
            MessageKind.CANCELLED: self._on_cancelled,
            MessageKind.WINNER: self._on_winner,
            MessageKind.NAME_HINT: self._on_name_hint,
            MessageKind.ROUND: self._on_round,
            MessageKind.SUMMARY: self._on_summary,
            MessageKind.IGNORED: self._on_nothing,
            MessageKind.UNKNOWN: self._on_unknown,
        }

    def process_message(self, ctx: ChannelContext, message: ExportMessage) -> None:
        """Apply one archived message to the store and to *ctx*."""
        self._observe_hints(message)
        if message.author.id != self.bot_author_id:
            return

        for index, embed in enumerate(message.embeds):
            rule: EmbedRule = classify_embed(message, embed, index)
            logger.debug("Message %s embed %d → %s", message.id, index, rule.name)
            self._handlers[rule.kind](ctx, message, embed)
            if rule.final:
                break

    # -----------------------------------------------------------------------
    # Identity hints
    # -----------------------------------------------------------------------
    def _observe_hints(self, message: ExportMessage) -> None:
        at = message.timestamp
        if message.interaction is not None:
            user = message.interaction.user
            self.resolver.observe(user.id, user.name, at)
        for mention in message.mentions:
            self.resolver.observe(mention.id, mention.name, at)
        for reaction in message.reactions:
            for user in reaction.users:
                self.resolver.observe(user.id, user.name, at)
        if message.author.id != self.bot_author_id:
            self.resolver.observe(message.author.id, message.author.name, at)

    # -----------------------------------------------------------------------
    # Lifecycle handlers
    # -----------------------------------------------------------------------
    def _on_countdown(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        # "Rumble Royale hosted by astelzoom" / "Era: <:wol:1>Classic ..."
        game = self.session.scalar(
            select(Game).where(
                Game.discord_channel_id == ctx.channel_id,
                Game.countdown_start_time == message.timestamp,
            )
        )
        if game is not None:
            logger.info("Countdown at %s already imported as game %d", message.timestamp, game.id)
        else:
            host_name = parse_host(embed.title)
            host = (
                self.resolver.resolve_by_name(host_name, message_id=message.id)
                if host_name else None
            )
            game = Game(
                id=self.allocator.next_id(),
                discord_channel_id=ctx.channel_id,
                era=parse_era(embed.description),
                host_user_name=host_name,
                host_user_id=host.id if host is not None else None,
                countdown_start_time=message.timestamp,
            )
            logger.debug("Game %d counting down (host=%s)", game.id, host_name)
        ctx.begin_countdown(game)

    def _on_start(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        if ctx.phase is not Phase.COUNTING_DOWN:
            if not ctx.has_seen_game:
                logger.warning("Ignoring leftover game start in message %s", message.id)
                return
            raise InconsistentState("game start", f"while game phase is {ctx.phase}")

        game = ctx.game
        game.start_time = message.timestamp
        prize = parse_prize(embed.description)
        if prize is not None:
            game.reward_coins = prize
        multiplier = parse_xp_multiplier(embed.description)
        if multiplier is not None:
            game.xp_multiplier = multiplier
        self._persist_game(game, message)
        ctx.start()
        logger.info(
            "Game %d started in channel %s (era=%s, prize=%d)",
            game.id, ctx.channel_id, game.era, game.reward_coins,
        )

    def _on_round(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        # "__Round 3__" or "__Round 3__ - STORM"
        if not self._require_running(ctx, "round", message):
            return

        announced = parse_round_number(embed.title)
        if announced is not None and announced != ctx.round_number:
            logger.warning(
                "Round title says %d but round %d of game %d was expected (message %s)",
                announced, ctx.round_number, ctx.game.id, message.id,
            )

        round_ = self._get_or_create_round(ctx.game, ctx.round_number, message)
        if is_event_round(embed.title):
            self.recorder.record_event(
                round_, parse_event_round(embed.title, embed.description), message_id=message.id
            )
        else:
            for position, line in enumerate(parse_round_lines(embed.description)):
                self.recorder.record_line(round_, position, line, message_id=message.id)
        ctx.advance_round()

    def _on_winner(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        if not self._require_running(ctx, "game winner", message):
            return
        game = ctx.game
        game.end_time = message.timestamp
        self._persist_game(game, message)
        ctx.finish()
        logger.info("Game %d ended after %d round(s)", game.id, ctx.round_number - 1)

        trailing = message.embeds[1:]
        if trailing:
            # Runners-up, most kills and most revives are not modelled yet
            logger.info(
                "Not persisting %d summary embed(s) of game %d (message %s)",
                len(trailing), game.id, message.id,
            )

    def _on_cancelled(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        if not self._require_running(ctx, "game cancellation", message):
            return
        game = ctx.game
        game.end_time = message.timestamp
        game.cancelled = True
        self._persist_game(game, message)
        ctx.finish()
        logger.info("Game %d cancelled", game.id)

    def _on_summary(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        # Runners-up / most kills / most revives are not modelled; never fatal
        if not ctx.has_seen_game:
            logger.warning("Ignoring leftover game summary data in message %s", message.id)
            return
        logger.info("Not persisting game summary embed in message %s", message.id)

    # -----------------------------------------------------------------------
    # Non-lifecycle handlers
    # -----------------------------------------------------------------------
    def _on_name_hint(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        # "alexhero's balance" in reply to /balance
        name = unescape_markdown(embed.author_name.split("'", 1)[0])
        self.resolver.observe(message.interaction.user.id, name, message.timestamp)

    def _on_unknown(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        logger.warning(
            "Ignoring unhandled message %s:\n\n%s\n\n%s\n",
            message.id, message.content, embed.model_dump_json(indent=2, exclude_defaults=True),
        )

    def _on_nothing(self, ctx: ChannelContext, message: ExportMessage, embed: Embed) -> None:
        pass

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------
    def _require_running(self, ctx: ChannelContext, kind: str, message: ExportMessage) -> bool:
        """True when a game is running; False for leftover data; raises otherwise."""
        if ctx.is_running:
            return True
        if not ctx.has_seen_game:
            logger.warning("Ignoring leftover %s data in message %s", kind, message.id)
            return False
        raise InconsistentState(kind, "when no game considered running")

    def _persist_game(self, game: Game, message: ExportMessage) -> None:
        if game.host_user_id is None and game.host_user_name:
            host = self.resolver.resolve_by_name(game.host_user_name, message_id=message.id)
            if host is not None:
                game.host_user_id = host.id
        if game not in self.session:
            self.session.add(game)
        self.session.flush()

    def _get_or_create_round(self, game: Game, number: int, message: ExportMessage) -> Round:
        round_ = self.session.scalar(
            select(Round).where(Round.game_id == game.id, Round.round_number == number)
        )
        if round_ is None:
            round_ = Round(game_id=game.id, round_number=number, post_time=message.timestamp)
            self.session.add(round_)
            self.session.flush()
        return round_
