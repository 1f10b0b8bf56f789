from __future__ import annotations

import logging
from datetime import date, datetime

from telegram import Update
from telegram.ext import (
    AIORateLimiter,
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from .config import Settings, load_settings
from .errors import SchedulingError
from .manager import TaskManager
from .parsing import parse_task_line
from .render import format_schedule, format_task_list
from .storage import Storage

log = logging.getLogger("slot_planner")


HELP = (
    "Commands:\n"
    "/add - add tasks, one per line\n"
    "/tasks - list tasks\n"
    "/delete <id> - remove a task\n"
    "/schedule - show the current schedule\n"
    "\n"
    "Task line format (everything but the title is optional):\n"
    "Write report 1h 30m !hard #high @2026-10-20\n"
    "priority: !asap !hard !soft !none, importance: #asap #high #average #low"
)


class BotApp:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.storage = Storage(settings.db_path)

        # in-memory flag: who is currently entering tasks
        self._awaiting_tasks: set[int] = set()

    def manager_for(self, user_id: int) -> TaskManager:
        return TaskManager(
            self.storage,
            user_id,
            grid=self.settings.grid(),
            max_days=self.settings.max_lookahead_days,
        )

    def _today(self) -> date:
        return datetime.now(self.settings.tz()).date()

    async def cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.message:
            await update.message.reply_text(
                "Hi! Send me your tasks and I will fit them into half-hour slots.\n\n" + HELP
            )

    async def cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if update.message:
            await update.message.reply_text(HELP)

    async def cmd_add(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        assert update.effective_user and update.message
        self._awaiting_tasks.add(int(update.effective_user.id))
        await update.message.reply_text("Send the tasks in one message, one per line.")

    async def cmd_tasks(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        assert update.effective_user and update.message
        manager = self.manager_for(int(update.effective_user.id))
        await update.message.reply_text(format_task_list(manager.tasks()))

    async def cmd_schedule(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        assert update.effective_user and update.message
        manager = self.manager_for(int(update.effective_user.id))
        await update.message.reply_text(format_schedule(manager.schedule()))

    async def cmd_delete(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        assert update.effective_user and update.message
        if not context.args or not context.args[0].isdigit():
            await update.message.reply_text("Usage: /delete <id>")
            return
        task_id = int(context.args[0])
        manager = self.manager_for(int(update.effective_user.id))
        try:
            deleted = manager.delete_task(task_id, today=self._today())
        except SchedulingError as e:
            await update.message.reply_text(f"Task kept, the schedule could not be rebuilt without it: {e}")
            return
        if not deleted:
            await update.message.reply_text(f"No task with id {task_id}.")
            return
        await update.message.reply_text("Removed.\n\n" + format_schedule(manager.schedule()))

    async def on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        assert update.effective_user and update.message
        user_id = int(update.effective_user.id)

        if user_id not in self._awaiting_tasks:
            return

        manager = self.manager_for(user_id)
        today = self._today()
        lines = [x.strip() for x in (update.message.text or "").splitlines()]
        parsed = [parse_task_line(x, today) for x in lines]
        parsed = [p for p in parsed if p is not None]
        if not parsed:
            await update.message.reply_text("No tasks found. Try again, one per line.")
            return

        rejected: list[str] = []
        for p in parsed:
            try:
                manager.add_task(
                    title=p.title,
                    duration=p.duration,
                    importance=p.importance,
                    priority=p.priority,
                    deadline=p.deadline,
                    today=today,
                )
            except SchedulingError as e:
                log.info("user %s: rejected task %r: %s", user_id, p.title, e)
                rejected.append(f"- {p.title}: {e}")

        self._awaiting_tasks.discard(user_id)
        msg = format_schedule(manager.schedule())
        if rejected:
            msg += "\n\nNot added:\n" + "\n".join(rejected)
        await update.message.reply_text(msg)


def build_application(bot_app: BotApp) -> Application:
    token = bot_app.settings.telegram_token
    if not token:
        raise RuntimeError("TELEGRAM_TOKEN is required")

    app = (
        Application.builder()
        .token(token)
        .rate_limiter(AIORateLimiter())
        .build()
    )

    app.add_handler(CommandHandler("start", bot_app.cmd_start))
    app.add_handler(CommandHandler("help", bot_app.cmd_help))
    app.add_handler(CommandHandler("add", bot_app.cmd_add))
    app.add_handler(CommandHandler("tasks", bot_app.cmd_tasks))
    app.add_handler(CommandHandler("delete", bot_app.cmd_delete))
    app.add_handler(CommandHandler("schedule", bot_app.cmd_schedule))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, bot_app.on_text))
    return app


def main() -> None:
    settings = load_settings()
    logging.basicConfig(level=settings.log_level)
    bot_app = BotApp(settings)
    app = build_application(bot_app)
    log.info("starting bot, db=%s tz=%s", settings.db_path, settings.timezone)
    app.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
