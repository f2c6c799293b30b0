# app/core/threading.py
import asyncio
import logging
import threading
import time
from concurrent.futures import Future
from typing import Callable, Dict, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

logger = logging.getLogger(__name__)


class TaskSignals(QObject):
    """Signals delivering a task outcome back to the thread that started it"""
    result = pyqtSignal(object)
    error = pyqtSignal(object)
    finished = pyqtSignal()


class AsyncLoopThread(QThread):
    """
    Qt thread owning one asyncio event loop for the lifetime of the application.
    All remote calls share this loop, so aiohttp sessions stay bound to it.

    Usage:
        loop_thread = AsyncLoopThread()
        loop_thread.start()
        future = loop_thread.submit(my_coroutine())
    """

    def __init__(self, parent=None):
        super().__init__(parent)
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self._ready = threading.Event()

    def run(self):
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)
        logger.debug("AsyncLoopThread: event loop started.")
        self._ready.set()
        try:
            self.loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self.loop)
            for task in pending:
                task.cancel()
            if pending:
                self.loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self.loop.run_until_complete(self.loop.shutdown_asyncgens())
            self.loop.close()
            logger.debug("AsyncLoopThread: event loop closed.")

    def wait_until_ready(self, timeout: float = 5.0) -> bool:
        return self._ready.wait(timeout)

    def submit(self, coro) -> Future:
        if not self.wait_until_ready():
            coro.close()
            raise RuntimeError("AsyncLoopThread event loop is not running")
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def stop(self, timeout_ms: int = 5000):
        if self.loop and self.loop.is_running():
            self.loop.call_soon_threadsafe(self.loop.stop)
        self.wait(timeout_ms)


class TaskManager:
    """Runs coroutines on the shared loop and reports back through Qt signals"""

    def __init__(self, loop_thread: Optional[AsyncLoopThread] = None):
        self.loop_thread = loop_thread or AsyncLoopThread()
        self.active_tasks: Dict[str, Future] = {}
        self._signals: Dict[str, TaskSignals] = {}
        self._task_counter = 0
        self._lock = threading.Lock()

    def start(self):
        if not self.loop_thread.isRunning():
            self.loop_thread.start()
            self.loop_thread.wait_until_ready()

    def _generate_task_id(self) -> str:
        with self._lock:
            self._task_counter += 1
            return f"task_{self._task_counter}_{int(time.time())}"

    def run_async_task(self,
                       async_fn: Callable,
                       *args,
                       task_name: Optional[str] = None,
                       on_result: Optional[Callable] = None,
                       on_error: Optional[Callable] = None,
                       **kwargs) -> str:
        """Schedule async_fn(*args, **kwargs) on the loop. Callbacks run on the caller's thread."""
        self.start()
        task_id = self._generate_task_id()
        task_name = task_name or f"AsyncTask {task_id}"

        signals = TaskSignals()
        if on_result:
            signals.result.connect(on_result)
        if on_error:
            signals.error.connect(on_error)
        signals.finished.connect(lambda: self._task_completed(task_id, task_name))
        self._signals[task_id] = signals

        start_time = time.time()
        future = self.loop_thread.submit(async_fn(*args, **kwargs))
        self.active_tasks[task_id] = future

        def on_done(done: Future):
            # Runs on the loop thread; signals queue the callbacks to the owner thread
            elapsed = time.time() - start_time
            if done.cancelled():
                logger.debug(f"Task {task_id} ({task_name}) cancelled after {elapsed:.2f}s, result dropped.")
            else:
                error = done.exception()
                if error is not None:
                    logger.error(f"Task {task_id} ({task_name}) failed after {elapsed:.2f}s: {error}", exc_info=error)
                    signals.error.emit(error)
                else:
                    value = done.result()
                    signals.result.emit(value)
            signals.finished.emit()

        future.add_done_callback(on_done)
        logger.debug(f"Started async task {task_id}: {task_name}")
        return task_id

    def cancel_task(self, task_id: str) -> bool:
        future = self.active_tasks.get(task_id)
        if future is None:
            return False
        # Disconnect first so a result already in flight is not delivered
        signals = self._signals.get(task_id)
        if signals is not None:
            for signal in (signals.result, signals.error):
                try:
                    signal.disconnect()
                except TypeError:
                    pass
        future.cancel()
        logger.debug(f"Cancelled task {task_id}")
        return True

    def _task_completed(self, task_id: str, task_name: str):
        self.active_tasks.pop(task_id, None)
        self._signals.pop(task_id, None)
        logger.debug(f"Completed task {task_id}: {task_name}")

    def get_active_task_count(self) -> int:
        return len(self.active_tasks)

    def cancel_all_tasks(self):
        for task_id in list(self.active_tasks.keys()):
            self.cancel_task(task_id)
        logger.info("Cancelled all active tasks")

    def run_coroutine_sync(self, coro, timeout: Optional[float] = None):
        """Run a coroutine on the loop and block for its result. Used for shutdown cleanup."""
        self.start()
        return self.loop_thread.submit(coro).result(timeout)

    def shutdown(self):
        self.cancel_all_tasks()
        self.loop_thread.stop()
        logger.info("TaskManager shutdown complete")


_task_manager: Optional[TaskManager] = None


def get_task_manager() -> TaskManager:
    """Get or create global task manager"""
    global _task_manager
    if _task_manager is None:
        _task_manager = TaskManager()
    return _task_manager
