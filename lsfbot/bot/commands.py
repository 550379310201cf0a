from aiogram.types import BotCommand

GROUP_COMMANDS = {
    "list": "Termine anzeigen (optional: TT.MM.JJJJ)",
    "update": "Stundenplan neu laden",
    "help": "Hilfe",
}

PRIVATE_COMMANDS = {
    **GROUP_COMMANDS,
    "enable": "Direktnachrichten aktivieren",
    "disable": "Direktnachrichten deaktivieren",
    "remove": "Direktnachrichten deaktivieren und Konfiguration löschen",
    "set": "send-before <Minuten|off> / send-after-previous <on|off>",
    "get": "Konfiguration anzeigen",
}


def as_bot_commands(commands: dict[str, str]) -> list[BotCommand]:
    return [BotCommand(command=name, description=description) for name, description in commands.items()]
