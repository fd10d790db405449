# celery_app.py  ─────────────────────────────────────────────────────────
from celery import Celery
import logging
import logging.config
from trade_indexer.config.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

# ── 1.  Broker / backend  ────────────────────────────────────
celery_app = Celery(
    "trade_indexer",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# ── 2.  Core config ───────────────────────────────────────────
celery_app.conf.update(
    task_serializer       ='json',
    result_serializer     ='json',
    accept_content        =['json'],
    timezone              ='UTC',
    enable_utc            =True,

    # decode tasks go to their own queue
    task_routes           ={"decode_call_data_batch": {"queue": "decode"}},
    result_expires        =3600,

    # --- recycle workers to avoid long‑lived memory creep
    worker_max_tasks_per_child = 200,
)

# ── 3.  Logging ────────────────────────────────────────────
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "custom": {
            "format": "[%(asctime)s] [%(levelname)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        }
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "custom"},
    },
    "root": {"level": "INFO", "handlers": ["console"]},
}
celery_app.conf.worker_hijack_root_logger = False


@celery_app.on_after_configure.connect
def _configure_worker_logging(sender, **kwargs):
    logging.config.dictConfig(LOGGING_CONFIG)


# ── 4.  Register task modules ─────────────────────────────────
import trade_indexer.sources.decoder.tasks
