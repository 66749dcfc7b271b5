import logging

from celery import shared_task

from .services import WithdrawalService

logger = logging.getLogger(__name__)


@shared_task(name='wallet.tasks.release_withheld_balances')
def release_withheld_balances():
    """
    Monthly job: move every withheld balance to available.
    """
    logger.info("Starting monthly withheld balance release")
    summary = WithdrawalService.release_all_withheld()
    return {
        'released_users': summary['released_users'],
        'total_released': str(summary['total_released']),
        'failed_users': summary['failed_users'],
    }
