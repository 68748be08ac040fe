"""Queue for side effects that must not block or roll back the primary write.

Work is recorded as ``DispatchTask`` rows inside the caller's transaction and
executed once that transaction commits (immediately when ``DISPATCH_EAGER`` is
on, otherwise by ``manage.py process_dispatch_queue``). Failed tasks back off
exponentially until ``max_attempts`` is reached. A worker claims a task with a
single conditional UPDATE before running it, so overlapping workers never run
the same task twice.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

from .models import DispatchTask

logger = logging.getLogger(__name__)

_HANDLERS = {}


def register(kind):
    def decorator(func):
        _HANDLERS[kind] = func
        return func

    return decorator


def registered_kinds():
    return sorted(_HANDLERS)


def enqueue(kind, **payload):
    task = DispatchTask.objects.create(
        kind=kind,
        payload=payload,
        max_attempts=settings.DISPATCH_MAX_ATTEMPTS,
    )
    if settings.DISPATCH_EAGER:
        task_id = task.pk
        transaction.on_commit(lambda: _run_pending(task_id))
    return task


def _run_pending(task_id):
    task = DispatchTask.objects.filter(pk=task_id, status=DispatchTask.STATUS_PENDING).first()
    if task is None:
        return
    run_task(task)


def _claim(task: DispatchTask, now):
    """Move ``task`` to running in one UPDATE; only the worker whose update lands runs it."""
    lease_until = now + timedelta(seconds=settings.DISPATCH_LEASE_SECONDS)
    claimable = Q(status=DispatchTask.STATUS_PENDING) | Q(status=DispatchTask.STATUS_RUNNING, available_at__lte=now)
    claimed = DispatchTask.objects.filter(claimable, pk=task.pk).update(
        status=DispatchTask.STATUS_RUNNING,
        attempts=F('attempts') + 1,
        available_at=lease_until,
    )
    task.refresh_from_db()
    return bool(claimed)


def run_task(task: DispatchTask, *, now=None):
    if not _claim(task, now or timezone.now()):
        logger.info('Dispatch task %s (%s) is held by another worker; skipping.', task.pk, task.kind)
        return task
    return _execute(task)


def _execute(task: DispatchTask):
    handler = _HANDLERS.get(task.kind)
    if handler is None:
        task.status = DispatchTask.STATUS_FAILED
        task.last_error = f"No handler registered for {task.kind}."
        logger.error('Dropping dispatch task %s: no handler for %s.', task.pk, task.kind)
        task.save(update_fields=['status', 'last_error'])
        return task

    try:
        handler(**task.payload)
    except Exception as exc:
        logger.exception('Dispatch task %s (%s) failed on attempt %s.', task.pk, task.kind, task.attempts)
        task.last_error = str(exc)[:2000]
        if task.attempts >= task.max_attempts:
            task.status = DispatchTask.STATUS_FAILED
        else:
            task.status = DispatchTask.STATUS_PENDING
            delay = settings.DISPATCH_RETRY_SECONDS * (2 ** (task.attempts - 1))
            task.available_at = timezone.now() + timedelta(seconds=delay)
        task.save(update_fields=['status', 'last_error', 'available_at'])
        return task

    task.status = DispatchTask.STATUS_DONE
    task.completed_at = timezone.now()
    task.last_error = ''
    task.save(update_fields=['status', 'last_error', 'completed_at'])
    return task


def process_pending_tasks(*, limit=100, now=None):
    now = now or timezone.now()
    due = Q(status=DispatchTask.STATUS_PENDING) | Q(status=DispatchTask.STATUS_RUNNING)
    tasks = list(DispatchTask.objects.filter(due, available_at__lte=now).order_by('available_at', 'id')[:limit])

    summary = {'done': 0, 'retrying': 0, 'failed': 0, 'skipped': 0}
    for task in tasks:
        if not _claim(task, now):
            summary['skipped'] += 1
            continue
        _execute(task)
        if task.status == DispatchTask.STATUS_DONE:
            summary['done'] += 1
        elif task.status == DispatchTask.STATUS_FAILED:
            summary['failed'] += 1
        else:
            summary['retrying'] += 1
    return summary
