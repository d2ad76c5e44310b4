"""
Ordered fallback chain used by the GPU driver stage.

Methods are tried strictly in declared order until one reports SUCCESS.
SKIPPED results (method not applicable here) do not stop iteration and do
not count as failures. Exhausting the list yields a FAILED stage outcome
whose detail lists every attempt, even when nothing was applicable.
"""

from dataclasses import dataclass, replace
from typing import Callable, List, Sequence

from ..core.dataclasses import DisplayAdapter, MethodResult, RunContext, StageOutcome
from ..core.enums import MethodStatus
from ..core.exceptions import UpkeepError

MethodAction = Callable[[RunContext], MethodResult]


@dataclass(frozen=True)
class UpdateMethod:
    """One named way of updating the driver."""

    name: str
    apply: MethodAction

    def skipped(self, detail: str) -> MethodResult:
        return MethodResult(self.name, MethodStatus.SKIPPED, detail)

    def failed(self, detail: str) -> MethodResult:
        return MethodResult(self.name, MethodStatus.FAILED, detail)

    def succeeded(self, detail: str, reboot_required: bool = False) -> MethodResult:
        return MethodResult(self.name, MethodStatus.SUCCESS, detail, reboot_required)


def _describe(adapters: Sequence[DisplayAdapter]) -> str:
    if not adapters:
        return "none"
    return ", ".join(adapter.describe() for adapter in adapters)


class FallbackChain:
    """
    Detects the target hardware and walks the update methods.

    Args:
        methods: Update methods in the order they must be tried
        list_adapters: Returns the installed display adapters
        vendor_signature: Case-insensitive text identifying the target vendor
    """

    def __init__(
        self,
        methods: Sequence[UpdateMethod],
        list_adapters: Callable[[], List[DisplayAdapter]],
        vendor_signature: str,
    ):
        names = [method.name for method in methods]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate fallback method names: {names}")
        self.methods = tuple(methods)
        self.list_adapters = list_adapters
        self.vendor_signature = vendor_signature

    def matching_adapters(self) -> List[DisplayAdapter]:
        signature = self.vendor_signature.lower()
        return [
            adapter
            for adapter in self.list_adapters()
            if signature in f"{adapter.name} {adapter.vendor or ''}".lower()
        ]

    def run_methods(self, context: RunContext) -> List[MethodResult]:
        """Try each method in order, stopping at the first SUCCESS."""
        log = context.logger
        attempts = []
        for method in self.methods:
            try:
                result = method.apply(context)
            except UpkeepError as e:
                result = method.failed((e.message or "").strip() or type(e).__name__)
            except Exception as e:  # method errors stay local to the chain
                result = method.failed(f"{type(e).__name__}: {e}")

            if result.method != method.name:
                result = replace(result, method=method.name)
            attempts.append(result)

            if result.status is MethodStatus.SUCCESS:
                log.info(f"GPU driver method {result.status_line()}")
                break
            elif result.status is MethodStatus.SKIPPED:
                log.info(f"GPU driver method {result.status_line()}")
            else:
                log.warning(f"GPU driver method {result.status_line()}")
        return attempts

    def execute(self, context: RunContext) -> StageOutcome:
        log = context.logger

        # Step 1: hardware detection
        try:
            before = self.matching_adapters()
        except UpkeepError as e:
            return StageOutcome.failure(f"Could not query display adapters: {e.message}")

        if not before:
            return StageOutcome.no_hardware(
                f"No {self.vendor_signature} display adapter detected"
            )
        log.info(f"Detected {self.vendor_signature} adapter(s): {_describe(before)}")

        # Step 2: methods in declared order
        attempts = self.run_methods(context)

        # Step 3: compare driver versions regardless of outcome
        try:
            after_text = _describe(self.matching_adapters())
        except UpkeepError as e:
            after_text = f"unknown ({e.message})"
        versions = f"driver before: {_describe(before)}; after: {after_text}"
        attempted = "; ".join(result.status_line() for result in attempts)

        winner = attempts[-1] if attempts else None
        if winner is not None and winner.status is MethodStatus.SUCCESS:
            return StageOutcome.success(
                f"Updated via {winner.method}; attempts: {attempted}; {versions}",
                reboot_required=winner.reboot_required,
            )

        if any(result.status is MethodStatus.FAILED for result in attempts):
            reason = "all methods failed"
        else:
            reason = "no method applicable"
        return StageOutcome.failure(
            f"{reason}; attempts: {attempted or 'none'}; {versions}"
        )
