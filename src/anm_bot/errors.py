"""Exception hierarchy shared by the transport, manager and hub layers."""


class AnmBotError(Exception):
    """Base class for every error raised by the bot."""


class TransportConstructionError(AnmBotError):
    """A transport client could not be built or could not connect.

    Fatal to the current ``start()`` attempt only.
    """


class DeliverySendFailure(AnmBotError):
    """An outbound message could not be delivered to a correspondent."""


class MalformedCommand(AnmBotError):
    """An observer sent a frame that is not a recognised operator command."""
