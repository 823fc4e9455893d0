from celery import Celery

from walletcore.config import settings

celery_app = Celery("walletcore", broker=settings.redis_url, backend=settings.redis_url)
celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_acks_late=True,
)
