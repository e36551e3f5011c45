"""
Grading Engine - chạy code của học viên trên toàn bộ test case và tính điểm.

Luồng xử lý:
1. Kiểm tra điều kiện (ngôn ngữ hợp lệ, có test case) trước khi chạy bất cứ gì
2. Chạy song song mỗi test case một lần qua execution client (trong thread)
3. So sánh stdout với expected output bằng comparator
4. Tổng hợp: số test đạt, số test lỗi hạ tầng, điểm theo tỉ lệ

Lỗi hạ tầng của một test case (sandbox không phản hồi, internal error) không
làm dừng việc chấm các test còn lại: test đó được ghi nhận là `errored`.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from .comparator import compare
from .errors import ExecutionUnavailable, NoTestCases
from .languages import ensure_supported
from .types import (
    FINISHED_STATUSES,
    CaseVerdict,
    ExecutionResult,
    ExecutionStatus,
    GradingOutcome,
    TestCaseData,
    TestCaseResult,
)

logger = logging.getLogger(__name__)


def calculate_points(passed_count: int, total_count: int, point_value: int) -> int:
    """round(passed / total * point_value), làm tròn nửa lên như Math.round."""
    if total_count <= 0 or point_value <= 0:
        return 0
    points = (2 * passed_count * point_value + total_count) // (2 * total_count)
    return max(0, min(points, point_value))


class GradingEngine:
    """
    Orchestrates execution of all test cases of one submission.

    `client` is any object with a blocking
    `execute(source_code, language_id, stdin) -> ExecutionResult` method
    that raises `ExecutionUnavailable` on transport failure.
    """

    def __init__(
        self,
        client,
        max_concurrency: int = 4,
        call_timeout: Optional[float] = None,
        overall_timeout: Optional[float] = None,
    ):
        self.client = client
        self.max_concurrency = max(1, int(max_concurrency))
        self.call_timeout = call_timeout
        self.overall_timeout = overall_timeout

    async def grade(
        self,
        source_code: str,
        language_id: int,
        test_cases: Sequence[TestCaseData],
        point_value: int,
    ) -> GradingOutcome:
        ensure_supported(language_id)
        cases = list(test_cases)
        if not cases:
            raise NoTestCases()

        semaphore = asyncio.Semaphore(self.max_concurrency)
        tasks = [
            asyncio.ensure_future(self._run_case(semaphore, position, case, source_code, language_id))
            for position, case in enumerate(cases)
        ]

        done, pending = await asyncio.wait(tasks, timeout=self.overall_timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                f"Grading deadline of {self.overall_timeout:g}s exceeded, "
                f"{len(pending)}/{len(cases)} test cases did not finish"
            )

        results: List[TestCaseResult] = []
        for position, (case, task) in enumerate(zip(cases, tasks)):
            if task in done:
                results.append(task.result())
            else:
                results.append(self._errored(position, case, "Grading deadline exceeded"))

        passed_count = sum(1 for r in results if r.passed)
        errored_count = sum(1 for r in results if r.errored)
        outcome = GradingOutcome(
            results=results,
            passed_count=passed_count,
            total_count=len(results),
            errored_count=errored_count,
            points_earned=calculate_points(passed_count, len(results), point_value),
        )

        if outcome.ungradable:
            logger.warning(f"Submission ungradable: all {outcome.total_count} test cases failed to execute")
        elif errored_count:
            logger.warning(f"{errored_count}/{outcome.total_count} test cases failed to execute")
        logger.info(
            f"Graded submission: {passed_count}/{outcome.total_count} passed, "
            f"{outcome.points_earned}/{point_value} points"
        )
        return outcome

    async def run_once(self, source_code: str, language_id: int, stdin: str = "") -> ExecutionResult:
        """Chạy thử code một lần, không dùng test case và không chấm điểm."""
        ensure_supported(language_id)
        return await self._execute(source_code, language_id, stdin or "")

    async def _execute(self, source_code: str, language_id: int, stdin: str) -> ExecutionResult:
        call = asyncio.to_thread(self.client.execute, source_code, language_id, stdin)
        if self.call_timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self.call_timeout)
        except asyncio.TimeoutError:
            raise ExecutionUnavailable(f"Sandbox did not answer within {self.call_timeout:g}s")

    async def _run_case(
        self,
        semaphore: asyncio.Semaphore,
        position: int,
        case: TestCaseData,
        source_code: str,
        language_id: int,
    ) -> TestCaseResult:
        async with semaphore:
            try:
                execution = await self._execute(source_code, language_id, case.input or "")
            except ExecutionUnavailable as e:
                logger.warning(f"Test case #{position} could not be executed: {e}")
                return self._errored(position, case, str(e))
            except Exception as e:
                # Lỗi bất ngờ của client chỉ làm hỏng test case này
                logger.exception(f"Unexpected error while executing test case #{position}")
                return self._errored(position, case, f"Unexpected execution error: {e}")
        return self._judge(position, case, execution)

    def _judge(self, position: int, case: TestCaseData, execution: ExecutionResult) -> TestCaseResult:
        error = None
        if execution.status == ExecutionStatus.INTERNAL_ERROR:
            verdict = CaseVerdict.ERRORED
            error = execution.message or execution.description or "Sandbox internal error"
        elif execution.status in FINISHED_STATUSES and compare(execution.stdout, case.expected_output):
            verdict = CaseVerdict.PASSED
        else:
            verdict = CaseVerdict.FAILED

        return TestCaseResult(
            position=position,
            test_case_id=case.id,
            verdict=verdict,
            hidden=case.is_hidden,
            input=case.input,
            expected_output=case.expected_output,
            status=execution.status,
            description=execution.description,
            stdout=execution.stdout,
            stderr=execution.stderr,
            compile_output=execution.compile_output,
            time=execution.time,
            memory=execution.memory,
            error=error,
        )

    def _errored(self, position: int, case: TestCaseData, error: str) -> TestCaseResult:
        return TestCaseResult(
            position=position,
            test_case_id=case.id,
            verdict=CaseVerdict.ERRORED,
            hidden=case.is_hidden,
            input=case.input,
            expected_output=case.expected_output,
            status=ExecutionStatus.INTERNAL_ERROR,
            error=error,
        )


__all__ = ["GradingEngine", "calculate_points"]
