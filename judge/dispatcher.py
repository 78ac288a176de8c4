import asyncio
import concurrent.futures
import queue
import threading

from . import config, pipeline
from .engine import JudgeEngine
from .exception import DuplicatedSubmissionIdError, SubmissionIdNotFoundError
from .meta import ExecutionRequest, SubmissionResult
from .utils import logger


class Dispatcher(threading.Thread):
    """
    Serve the judge engine from one event loop thread.

    At most `MAX_CONCURRENCY` executions run at once, the rest wait for a
    slot in arrival order. At most `MAX_TASK_COUNT` executions may be
    admitted (waiting or running); beyond that callers get `queue.Full`.
    """

    def __init__(
        self,
        dispatcher_config=".config/dispatcher.json",
        engine: JudgeEngine | None = None,
    ):
        super().__init__(daemon=True)
        self.testing = False
        # read config
        queue_limit, concurrency = config.get_dispatcher_limits(
            dispatcher_config)
        self.do_run = False
        self.MAX_TASK_COUNT = queue_limit
        self.MAX_CONCURRENCY = concurrency
        self.engine = engine if engine is not None else JudgeEngine()
        self.loop = asyncio.new_event_loop()
        self.slots = asyncio.Semaphore(self.MAX_CONCURRENCY)
        # submission id -> future of the queued submission
        self.result = {}
        self.lock = threading.RLock()
        self.pending_count = 0
        self.running_count = 0

    @property
    def load(self) -> float:
        return self.pending_count / self.MAX_TASK_COUNT

    def contains(self, submission_id: str):
        return submission_id in self.result

    def start(self):
        self.do_run = True
        super().start()

    def run(self):
        asyncio.set_event_loop(self.loop)
        logger().debug('start dispatcher loop')
        try:
            self.loop.run_forever()
        finally:
            tasks = asyncio.all_tasks(self.loop)
            for task in tasks:
                task.cancel()
            self.loop.run_until_complete(
                asyncio.gather(*tasks, return_exceptions=True))
            self.loop.close()
            logger().debug('exit dispatcher loop')

    def stop(self):
        self.do_run = False
        if not self.loop.is_closed():
            self.loop.call_soon_threadsafe(self.loop.stop)

    def execute(self, *args, **kwargs) -> concurrent.futures.Future:
        '''
        schedule `JudgeEngine.execute_code`, the future resolves to a
        `SubmissionResult`
        '''
        return self._submit(self._in_slot, self.engine.execute_code, *args,
                            **kwargs)

    def snippet(self, *args, **kwargs) -> concurrent.futures.Future:
        return self._submit(self._in_slot, self.engine.run_snippet, *args,
                            **kwargs)

    def handle(
        self,
        submission_id: str,
        request: ExecutionRequest,
    ) -> concurrent.futures.Future:
        '''
        judge a submission in background and report the result to backend
        '''
        with self.lock:
            if self.contains(submission_id):
                raise DuplicatedSubmissionIdError(
                    f'duplicated submission id {submission_id}.')
            future = self._submit(self._judge_and_report, submission_id,
                                  request)
            self.result[submission_id] = future
        logger().info(f'submission queued [id={submission_id}]')
        return future

    def release(self, submission_id: str):
        with self.lock:
            if not self.contains(submission_id):
                raise SubmissionIdNotFoundError(
                    f'{submission_id} not found!')
            del self.result[submission_id]

    def _submit(self, fn, *args, **kwargs) -> concurrent.futures.Future:
        if not self.do_run:
            raise RuntimeError('dispatcher is not running')
        with self.lock:
            if self.pending_count >= self.MAX_TASK_COUNT:
                raise queue.Full
            self.pending_count += 1
        return asyncio.run_coroutine_threadsafe(
            self._admitted(fn, *args, **kwargs),
            self.loop,
        )

    async def _admitted(self, fn, *args, **kwargs):
        try:
            return await fn(*args, **kwargs)
        finally:
            with self.lock:
                self.pending_count -= 1

    async def _in_slot(self, fn, *args, **kwargs):
        async with self.slots:
            with self.lock:
                self.running_count += 1
            try:
                return await fn(*args, **kwargs)
            finally:
                with self.lock:
                    self.running_count -= 1

    async def _judge_and_report(
        self,
        submission_id: str,
        request: ExecutionRequest,
    ) -> SubmissionResult:
        try:
            result = await self._in_slot(
                self.engine.execute_code,
                request.code,
                request.language,
                request.testCases,
                time_limit=request.timeLimit,
                memory_limit=request.memoryLimit,
                compare_strategy=request.compareStrategy,
                precision=request.precision,
            )
            await self.on_submission_complete(submission_id, result)
            return result
        finally:
            self.release(submission_id)

    async def on_submission_complete(
        self,
        submission_id: str,
        result: SubmissionResult,
    ):
        if self.testing:
            logger().info(
                f'skip submission post processing in testing [submission_id={submission_id}]'
            )
            return True
        return await asyncio.to_thread(
            pipeline.report_result,
            submission_id,
            result,
        )
