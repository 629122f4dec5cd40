"""IRC session adapter over the ``irc`` library's callback reactor.

The reactor is callback driven; the listener wants a blocking "next event"
call. The session registers handlers that append to a private deque and
pumps the reactor until something is queued. Only the listener thread ever
touches a session, so the deque needs no lock.
"""

import collections
import functools
import logging
import ssl

import irc.client
import irc.connection
from jaraco.stream import buffer

from irc_logger.config import IrcConfig
from irc_logger.errors import ConnectError, SessionError

logger = logging.getLogger(__name__)


class IrcSession:
    """One live IRC connection, read as a stream of raw-line events."""

    def __init__(self, reactor, connection, channels=(), channel_keys=None,
                 nick_password: str = "", poll_interval: float = 0.2):
        self._reactor = reactor
        self._connection = connection
        self._channels = tuple(channels)
        self._channel_keys = dict(channel_keys or {})
        self._nick_password = nick_password
        self._poll_interval = poll_interval
        self._pending: collections.deque = collections.deque()
        self._welcomed = False
        self._failure: SessionError | None = None

        reactor.add_global_handler("all_raw_messages", self._on_raw_message)
        reactor.add_global_handler("welcome", self._on_welcome)
        reactor.add_global_handler("disconnect", self._on_disconnect)

    @property
    def welcomed(self) -> bool:
        return self._welcomed

    def _on_raw_message(self, connection, event):
        self._pending.append(event)

    def _on_welcome(self, connection, event):
        logger.info("Registered with %s as %s", event.source, connection.get_nickname())
        self._welcomed = True

    def _on_disconnect(self, connection, event):
        reason = event.arguments[0] if event.arguments else "disconnected"
        self._pending.append(SessionError(f"IRC session lost: {reason}"))

    def next_event(self):
        """Block until the next raw line arrives; raise SessionError once lost."""
        if self._failure is not None:
            raise self._failure

        while not self._pending:
            try:
                self._reactor.process_once(timeout=self._poll_interval)
            except (OSError, ValueError, irc.client.IRCError) as exc:
                error = SessionError(f"IRC session failed: {exc}")
                # keeps the errno reachable after the error is re-raised later
                error.__cause__ = exc
                self._pending.append(error)

        item = self._pending.popleft()
        if isinstance(item, SessionError):
            self._failure = item
            self._pending.clear()
            raise item
        return item

    def render(self, event) -> str:
        return event.arguments[0]

    def identify(self) -> bool:
        """Authenticate with NickServ and join channels once registration is accepted.

        Returns False until the server has sent its welcome, so the caller
        can simply try again on the next line.
        """
        if not self._welcomed or not self._connection.is_connected():
            return False
        try:
            if self._nick_password:
                self._connection.privmsg("NickServ", f"IDENTIFY {self._nick_password}")
            for channel in self._channels:
                self._connection.join(channel, self._channel_keys.get(channel, ""))
        except irc.client.ServerNotConnectedError:
            return False
        except ValueError as exc:
            # InvalidCharacters / MessageTooLong from a bad channel, key or password
            logger.warning("Identification rejected by client: %s", exc)
            return False
        logger.info("Identified; joined %d channel(s)", len(self._channels))
        return True


def _connect_factory(config: IrcConfig):
    if not config.use_ssl:
        return irc.connection.Factory()
    context = ssl.create_default_context()
    return irc.connection.Factory(
        wrapper=functools.partial(context.wrap_socket, server_hostname=config.server)
    )


def connect_session(config: IrcConfig, reactor=None) -> IrcSession:
    """Open the IRC connection and send registration. Raises ConnectError."""
    reactor = reactor or irc.client.Reactor()
    connection = reactor.server()
    connection.buffer_class = buffer.LenientDecodingLineBuffer
    session = IrcSession(
        reactor,
        connection,
        channels=config.channels,
        channel_keys=config.channel_keys,
        nick_password=config.nick_password,
    )

    try:
        connection.connect(
            config.server,
            config.port,
            config.nickname,
            password=config.password or None,
            username=config.username or None,
            ircname=config.realname or None,
            connect_factory=_connect_factory(config),
        )
    except irc.client.ServerConnectionError as exc:
        raise ConnectError(
            f"Cannot connect to IRC server {config.server}:{config.port}: {exc}"
        ) from exc

    logger.info("Connected to IRC server %s:%d as %s",
                config.server, config.port, config.nickname)
    return session
