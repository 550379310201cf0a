from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.client.session.aiohttp import AiohttpSession

from lsfbot.bot.handlers import schedule, subscriptions
from lsfbot.bot.middlewares import LoggingMiddleware
from lsfbot.config import settings

if settings.TELEGRAM_PROXY:
    session = AiohttpSession(proxy=settings.TELEGRAM_PROXY)
    bot = Bot(token=settings.BOT_TOKEN, default=DefaultBotProperties(parse_mode="HTML"), session=session)
else:
    bot = Bot(token=settings.BOT_TOKEN, default=DefaultBotProperties(parse_mode="HTML"))
dp = Dispatcher()

dp.message.middleware(LoggingMiddleware())

dp.include_router(schedule.router)
dp.include_router(subscriptions.router)
