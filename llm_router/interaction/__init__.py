from llm_router.interaction.console import (
    ConsoleInterjectionChannel,
    InputClosed,
    InterjectionChannel,
    parse_interjection,
)

__all__ = ["ConsoleInterjectionChannel", "InputClosed", "InterjectionChannel", "parse_interjection"]
