from dataclasses import dataclass
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from core.config_loader import AppConfig
from core.formatting import DisplayFormatter
from database.database import build_engine, build_session_factory
from database.uow import UnitOfWorkFactory, uow_factory
from notification.channels import EmailSender, PushSender, InAppSender
from notification.dispatcher import NotificationDispatcher
from notification.gateways import EmailGateway, PushGateway, SmtpEmailGateway, build_push_gateway
from notification.message_builder import NotificationMessageBuilder
from notification.tracker import SuppressionGuard
from pipeline.scanner import DueReminderScanner, NotificationCleanup
from pipeline.scheduler import ReminderScheduler


@dataclass
class AppContext:
    """Application context container that holds all wired dependencies.

    This eliminates duplicate wiring code and provides a single source
    of truth for service instantiation. DB access is obtained per unit of
    work through ``uow`` inside each processing step.
    """
    config: AppConfig
    engine: Engine
    session_factory: sessionmaker
    uow: UnitOfWorkFactory
    email_sender: EmailSender
    dispatcher: NotificationDispatcher
    scanner: DueReminderScanner
    cleanup: NotificationCleanup
    scheduler: ReminderScheduler

    @classmethod
    def build(
        cls,
        config: AppConfig,
        engine: Optional[Engine] = None,
        email_gateway: Optional[EmailGateway] = None,
        push_gateway: Optional[PushGateway] = None,
    ) -> "AppContext":
        """Build an AppContext from config.

        Args:
            config: Loaded application configuration
            engine: Existing engine to reuse (tests pass an in-memory one)
            email_gateway: Override for the SMTP gateway
            push_gateway: Override for the configured push provider

        Returns:
            Fully wired AppContext instance (scheduler not started)
        """
        engine = engine or build_engine(config.database.url)
        session_factory = build_session_factory(engine)
        uow = uow_factory(session_factory)

        builder = NotificationMessageBuilder(
            formatter=DisplayFormatter(config.formatting),
            frontend_url=config.app.frontend_url,
            app_name=config.app.name,
        )

        email_sender = EmailSender(email_gateway or SmtpEmailGateway(config.email), builder)
        if push_gateway is None:
            push_gateway = build_push_gateway(config.push)

        dispatcher = NotificationDispatcher([
            email_sender,
            PushSender(push_gateway, builder),
            InAppSender(uow, builder),
        ])

        scanner = DueReminderScanner(
            dispatcher=dispatcher,
            guard=SuppressionGuard(cooldown_hours=config.reminders.cooldown_hours),
            uow=uow,
            notice_window_minutes=config.reminders.notice_window_minutes,
        )
        cleanup = NotificationCleanup(uow=uow, retention_days=config.reminders.retention_days)
        scheduler = ReminderScheduler(scanner, cleanup, config.scheduler)

        return cls(
            config=config,
            engine=engine,
            session_factory=session_factory,
            uow=uow,
            email_sender=email_sender,
            dispatcher=dispatcher,
            scanner=scanner,
            cleanup=cleanup,
            scheduler=scheduler,
        )
