"""Main entry point for the RSS mail notifier."""

import logging
import os
import sys
from typing import Optional

from .config import Config, default_config_path, load_config
from .diff import diff_items, transform_items
from .email_notifier import JinjaTemplateRenderer, Notifier, SmtpMailTransport
from .errors import NotifierError
from .models import RunOutcome
from .rss_client import FeedFetcher, FeedparserParser, RequestsHttpClient
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class Pipeline:
    """
    Fetch, diff, notify and persist, in that order.

    The snapshot is only replaced after the mail went out. Any failure before
    that point leaves it untouched, so unnotified items show up again on the
    next run.
    """

    def __init__(self, fetcher: FeedFetcher, store: SnapshotStore, notifier: Notifier):
        self.fetcher = fetcher
        self.store = store
        self.notifier = notifier

    def run_once(self, config: Config) -> RunOutcome:
        new_doc = self.fetcher.fetch(config.remote_rss)
        old_doc = self.store.load(config.local_rss)

        new_items = diff_items(new_doc, old_doc)
        if not new_items:
            logger.info("new and old feed are the same; nothing to send.")
            return RunOutcome.NO_CHANGES

        logger.info(f"Found {len(new_items)} new items")
        payload = transform_items(new_items)
        body = self.notifier.render(payload)
        self.notifier.send(config, body)

        self.store.save(config.local_rss, new_doc)
        return RunOutcome.NOTIFIED


def build_pipeline(config: Config) -> Pipeline:
    """Wire the pipeline to the real feed, template and mail collaborators."""
    parser = FeedparserParser()
    return Pipeline(
        fetcher=FeedFetcher(RequestsHttpClient(), parser),
        store=SnapshotStore(parser),
        notifier=Notifier(JinjaTemplateRenderer(config.template_dir), SmtpMailTransport()),
    )


def run(config_path: str, pipeline: Optional[Pipeline] = None) -> RunOutcome:
    """
    Load the configuration at ``config_path`` and run the pipeline once.

    Raises:
        NotifierError: On the first failing stage.
    """
    config = load_config(config_path)
    if pipeline is None:
        pipeline = build_pipeline(config)
    outcome = pipeline.run_once(config)
    logger.info(f"Run completed: {outcome.value}")
    return outcome


def setup_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def main() -> None:
    """Run once and exit non-zero on any failure."""
    config_path = default_config_path()
    setup_logging()
    try:
        run(config_path)
    except NotifierError as e:
        logger.error(str(e))
        logger.debug("Failure details", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
