import os

import pytest

# Make sure importing lsfbot.config doesn't fail during test collection.
# aiogram validates the token shape, so it has to look like a real one.
os.environ.setdefault("BOT_TOKEN", "123456789:AAHdqTcvCH1vGWJxfSeofSAs0K5PALDsaw")
os.environ["TZ"] = "Europe/Berlin"
os.environ.setdefault("GROUP_1_CHAT_ID", "-1001")
os.environ.setdefault("GROUP_2_CHAT_ID", "-1002")
os.environ.setdefault("GROUP_3_CHAT_ID", "-1003")
os.environ.setdefault("GROUP_4_CHAT_ID", "-1004")


@pytest.fixture
def subscribers(tmp_path, monkeypatch):
    """A fresh subscriber store on a temp file, swapped in everywhere it is used."""
    from lsfbot.bot.handlers import schedule as schedule_handlers
    from lsfbot.bot.handlers import subscriptions
    from lsfbot.services import scheduler_service
    from lsfbot.subscribers.store import SubscriberStore

    store = SubscriberStore(tmp_path / "subscribers.json")
    monkeypatch.setattr(subscriptions, "subscriber_store", store)
    monkeypatch.setattr(schedule_handlers, "subscriber_store", store)
    monkeypatch.setattr(scheduler_service, "subscriber_store", store)
    return store
