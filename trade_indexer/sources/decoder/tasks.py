from trade_indexer.celery.celery_app import celery_app
from trade_indexer.sources.decoder.decode_transaction_input import decode_transaction_input
import logging

logger = logging.getLogger(__name__)


@celery_app.task(name="decode_call_data_batch")
def decode_call_data_batch(calls: list) -> list:
    """
    Classify a batch of raw call-data hex strings off the scan loop.

    Returns one JSON-safe {"functionName", "params"} dict per input, in
    input order. Unrecognised input comes back as "Unknown (<selector>)".
    """
    out = [decode_transaction_input(data).to_dict() for data in calls]
    logger.debug("decoded %d call inputs", len(out))
    return out
