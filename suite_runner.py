"""CLI-friendly orchestrator for running UI test suites with retries."""
from __future__ import annotations

import argparse
import asyncio
import importlib
import inspect
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Set

from config import SteadyConfig, load_config
from context import RunContext, TestContext
from discovery import TestDescriptor, discover, select_tests
from exceptions import PreconditionError, SteadyError, SuiteLoadError, TestDefinitionError, TestExecutionError
from integrations import IntegrationManager
from reporters import JSONReporter, JUnitReporter, ReportFormat
from retry_rule import RetryingRule, TestBody
from suite_types import Outcome, SuiteResult


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class SuiteRunner:
    """Runs the valid tests of a suite class on a bounded pool of workers."""

    def __init__(
        self,
        config: SteadyConfig,
        integrations: Optional[IntegrationManager] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.logger = logger or logging.getLogger("steady.runner")
        self.integrations = integrations or IntegrationManager(logger=self.logger)

    def build_run_context(self, unique_id: Optional[str] = None) -> RunContext:
        """Run context from configuration; a run id is generated when none is set."""
        kwargs: dict[str, Any] = {
            "wait_seconds": self.config.wait.wait_in_seconds,
            "poll_interval": self.config.wait.poll_interval,
            "not_moving_interval": self.config.wait.not_moving_interval,
        }
        unique_id = unique_id or self.config.execution.unique_id
        if unique_id:
            kwargs["unique_id"] = unique_id
        return RunContext(**kwargs)

    def _body(self, descriptor: TestDescriptor) -> TestBody:
        """Fresh suite instance per attempt, with set_up/tear_down around the test."""

        async def body(ctx: TestContext) -> None:
            instance = descriptor.suite_class()
            set_up = getattr(instance, "set_up", None)
            tear_down = getattr(instance, "tear_down", None)
            if set_up is not None:
                await _maybe_await(set_up(ctx))
            try:
                method = getattr(instance, descriptor.method_name, None)
                if not callable(method):
                    raise TestExecutionError(
                        f"Suite instance has no callable {descriptor.method_name!r}",
                        test_name=descriptor.name,
                    )
                await _maybe_await(method(ctx))
            finally:
                if tear_down is not None:
                    await _maybe_await(tear_down(ctx))

        return body

    async def _execute(self, descriptor: TestDescriptor, run_context: RunContext, rule: RetryingRule) -> Outcome:
        """Run one descriptor to its final outcome and report it."""
        started = datetime.utcnow()
        try:
            outcome = await rule.run(descriptor, run_context, self._body(descriptor))
        except Exception as exc:
            self.logger.error(f"Test {descriptor.name} crashed: {exc}", exc_info=True)
            outcome = Outcome(
                descriptor=descriptor,
                passed=False,
                started_at=started,
                finished_at=datetime.utcnow(),
                error=exc,
                unique_id=run_context.unique_id,
            )

        status = "PASSED" if outcome.passed else "FAILED"
        self.logger.info(f"{status} {descriptor.name} ({outcome.attempts} attempt(s), {outcome.duration_seconds:.1f}s)")
        try:
            await self.integrations.report(outcome)
        except Exception as exc:
            self.logger.error(f"Reporting {descriptor.name} failed: {exc}", exc_info=True)
        return outcome

    async def run(
        self,
        suite_class: type,
        parallelism: Optional[int] = None,
        run_context: Optional[RunContext] = None,
        only_names: Optional[List[str]] = None,
        include_tags: Optional[Set[str]] = None,
        exclude_tags: Optional[Set[str]] = None,
    ) -> List[Outcome]:
        """
        Run every valid test of ``suite_class`` and return their outcomes.

        Workers pull tests from one shared queue, so each test is executed by
        exactly one worker. Outcomes come back in discovery order once the
        queue is drained, whatever failed along the way.
        """
        if parallelism is None:
            parallelism = self.config.execution.parallel_workers
        if parallelism < 1:
            raise PreconditionError(f"Parallelism must be at least 1, got {parallelism}")
        run_context = run_context or self.build_run_context()

        descriptors = select_tests(discover(suite_class), only_names, include_tags, exclude_tags)
        self.logger.info(
            f"Run {run_context.unique_id}: {len(descriptors)} test(s) from {suite_class.__name__} "
            f"on {parallelism} worker(s)"
        )

        queue: asyncio.Queue = asyncio.Queue()
        for index, descriptor in enumerate(descriptors):
            queue.put_nowait((index, descriptor))

        outcomes: List[Optional[Outcome]] = [None] * len(descriptors)
        rule = RetryingRule(self.config.execution.retry_budget, logger=self.logger)

        async def worker(worker_id: int) -> None:
            while True:
                try:
                    index, descriptor = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                self.logger.info(f"=== [worker {worker_id}] Running {descriptor.name} ({index + 1}/{len(descriptors)}) ===")
                try:
                    outcomes[index] = await self._execute(descriptor, run_context, rule)
                finally:
                    queue.task_done()

        workers = [asyncio.create_task(worker(n + 1)) for n in range(min(parallelism, len(descriptors)))]
        await asyncio.gather(*workers)

        return [o for o in outcomes if o is not None]

    async def run_suite(
        self,
        suite_class: type,
        parallelism: Optional[int] = None,
        run_context: Optional[RunContext] = None,
        only_names: Optional[List[str]] = None,
        include_tags: Optional[Set[str]] = None,
        exclude_tags: Optional[Set[str]] = None,
    ) -> SuiteResult:
        """Run a suite and write the configured suite reports."""
        run_context = run_context or self.build_run_context()
        start_time = datetime.utcnow()
        outcomes = await self.run(
            suite_class,
            parallelism=parallelism,
            run_context=run_context,
            only_names=only_names,
            include_tags=include_tags,
            exclude_tags=exclude_tags,
        )
        suite_result = SuiteResult(
            outcomes=outcomes,
            started_at=start_time,
            finished_at=datetime.utcnow(),
            unique_id=run_context.unique_id,
            suite_name=suite_class.__name__,
        )
        self._generate_suite_reports(suite_result)
        return suite_result

    def _generate_suite_reports(self, suite: SuiteResult) -> None:
        """Generate suite-level reports."""
        output_dir = self.config.reporting.reports_folder
        output_format = ReportFormat(self.config.reporting.output_format)

        if output_format.includes(ReportFormat.JSON):
            path = JSONReporter().generate_suite(suite, output_dir)
            self.logger.info(f"Suite JSON report: {path}")

        if output_format.includes(ReportFormat.JUNIT):
            path = JUnitReporter().generate_suite(suite, output_dir)
            self.logger.info(f"Suite JUnit report: {path}")


def load_suite(path: str) -> type:
    """Import a suite class from ``package.module:ClassName``."""
    module_name, sep, class_name = path.partition(":")
    if not sep or not module_name or not class_name:
        raise SuiteLoadError("Suite path must look like 'module:ClassName'", suite_path=path)
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise SuiteLoadError(f"Cannot import suite module: {exc}", suite_path=path) from exc
    suite_class = getattr(module, class_name, None)
    if not isinstance(suite_class, type):
        raise SuiteLoadError(f"No suite class {class_name!r} in {module_name}", suite_path=path)
    return suite_class


async def run_from_cli_args(args: argparse.Namespace, logger: logging.Logger) -> int:
    """Entry point shared by the CLI script."""
    try:
        suite_class = load_suite(args.suite)
    except SuiteLoadError as exc:
        logger.error(str(exc))
        return 1

    config_path = Path(args.config) if args.config else None
    cli_overrides = {
        "wait_seconds": args.wait_seconds,
        "parallel": args.parallel,
        "retries": args.retries,
        "unique_id": args.unique_id,
        "reports_dir": args.reports_dir,
        "output_format": args.output_format,
        "verbose": args.verbose or None,
    }
    cli_overrides = {k: v for k, v in cli_overrides.items() if v is not None}

    try:
        config = load_config(config_path, cli_overrides)
    except Exception as exc:
        logger.error(f"Failed to load config: {exc}")
        return 1

    if config.verbose:
        logger.info(f"Wait timeout: {config.wait.wait_in_seconds}s, poll interval: {config.wait.poll_interval}s")
        logger.info(f"Parallel workers: {config.execution.parallel_workers}, retries: {config.execution.retry_budget}")
        logger.info(f"Output format: {config.reporting.output_format}")

    runner = SuiteRunner(config=config, logger=logger)
    try:
        suite_result = await runner.run_suite(
            suite_class,
            only_names=args.test,
            include_tags=set(args.tag) if args.tag else None,
            exclude_tags=set(args.exclude_tag) if args.exclude_tag else None,
        )
    except TestDefinitionError as exc:
        logger.error(str(exc))
        return 1

    if suite_result.total == 0:
        logger.warning("No runnable tests found matching filters")
        return 0

    print("\n" + "=" * 60)
    print(f"SUITE SUMMARY ({suite_result.suite_name}, run {suite_result.unique_id})")
    print("=" * 60)
    print(f"Total:  {suite_result.total}")
    print(f"Passed: {suite_result.passed}")
    print(f"Failed: {suite_result.failed}")
    print(f"Pass Rate: {suite_result.pass_rate:.1f}%")
    print(f"Duration: {suite_result.duration_seconds:.1f}s")
    print("=" * 60)

    if suite_result.failed_tests:
        print("\nFailed Tests:")
        for outcome in suite_result.failed_tests:
            print(f"  - {outcome.test_name}: {outcome.reason[:80]}")

    return 1 if suite_result.failed > 0 else 0


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Run a UI test suite with bounded waits, retries and parallel workers.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s suites.login:LoginSuite                 # Run every test of a suite
  %(prog)s suites.login:LoginSuite --test test_ok  # Run one test
  %(prog)s suites.login:LoginSuite --tag smoke     # Run tests tagged 'smoke'
  %(prog)s suites.login:LoginSuite --parallel 4 --retries 2
        """,
    )
    parser.add_argument("suite", help="Suite class to run, as module:ClassName")

    selection_group = parser.add_argument_group("Test Selection")
    selection_group.add_argument(
        "--test",
        action="append",
        help="Only run this test method (can be used multiple times)",
    )
    selection_group.add_argument(
        "--tag",
        action="append",
        help="Only run tests with this tag (can be used multiple times)",
    )
    selection_group.add_argument(
        "--exclude-tag",
        action="append",
        help="Exclude tests with this tag (can be used multiple times)",
    )

    exec_group = parser.add_argument_group("Execution Options")
    exec_group.add_argument(
        "--parallel",
        type=int,
        metavar="N",
        help="Number of parallel test workers (default: 1)",
    )
    exec_group.add_argument(
        "--retries",
        type=int,
        metavar="N",
        help="Extra attempts for a failing test (default: 0)",
    )
    exec_group.add_argument(
        "--wait-seconds",
        type=float,
        metavar="S",
        help="Default wait timeout for element conditions (default: 30)",
    )
    exec_group.add_argument(
        "--unique-id",
        help="10-digit run id shared by every test (default: random)",
    )
    exec_group.add_argument(
        "--config",
        help="Path to config file (default: steady.json if exists)",
    )

    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "--reports-dir",
        help="Directory for saving reports (default: reports)",
    )
    output_group.add_argument(
        "--output-format",
        choices=["json", "junit", "all", "none"],
        help="Suite report format (default: junit)",
    )
    output_group.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    output_group.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-essential output",
    )

    return parser


def main() -> None:
    """Main entry point."""
    parser = _build_arg_parser()
    args = parser.parse_args()

    if args.quiet:
        log_level = logging.WARNING
    elif args.verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format="[%(levelname)s] %(message)s" if not args.verbose else "[%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger("steady.runner")

    try:
        exit_code = asyncio.run(run_from_cli_args(args, logger))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        exit_code = 130
    except SteadyError as exc:
        logger.error(f"Error: {exc}")
        exit_code = 1
    except Exception as exc:
        logger.exception(f"Unexpected error: {exc}")
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
