"""
Update scheduler for the test server.

This module drives the periodic tick that advances every live value and
writes it back, so subscribed clients receive data change notifications.
"""

import asyncio
import time
from typing import Optional

from ..errors import WriteFailure
from ..logging import log_info, log_error, log_debug
from ..types import (
    BulkVariableTable,
    FailurePolicy,
    FixedNodes,
    ScheduleState,
    TaggedValue,
    TypeConverter,
    ValueKind,
    VariableNode,
    wrap_int32,
)


def format_event(counter: int) -> str:
    """Text written to the string variable; the counter field is at least 3 wide."""
    return f"event: {counter:3d}"


class UpdateScheduler:
    """
    Advances and writes all live values once per cycle.

    Each tick, in order:
    - increments the 32-bit counter and writes it to MyVariable
    - writes "event: NNN" to MyStringVar
    - increments every MyArrayVar element, written as one value
    - flips MyBool
    - read-modify-writes every bulk variable in table order

    Usage:
        scheduler = UpdateScheduler(fixed_nodes, bulk_table, cycle_time_ms=2000)
        await scheduler.initialize()
        await scheduler.run()
    """

    def __init__(
        self,
        fixed_nodes: FixedNodes,
        bulk_table: BulkVariableTable,
        cycle_time_ms: int = 2000,
        failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST,
        state: Optional[ScheduleState] = None
    ):
        """
        Initialize update scheduler.

        Args:
            fixed_nodes: Handles of the hand-authored variables
            bulk_table: Handles of the bulk variables
            cycle_time_ms: Sleep between ticks in milliseconds
            failure_policy: Whether a failed write ends the run or is
                logged and skipped
            state: Starting state, a fresh ScheduleState by default
        """
        self.fixed_nodes = fixed_nodes
        self.bulk_table = bulk_table
        self.cycle_time_ms = cycle_time_ms
        self.failure_policy = failure_policy
        self.state = state if state is not None else ScheduleState()
        self.failed_writes = 0
        self._stop_event = asyncio.Event()

    @property
    def cycle_time_seconds(self) -> float:
        """Get cycle time in seconds."""
        return self.cycle_time_ms / 1000.0

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    async def initialize(self) -> None:
        """Publish the starting counter before the first tick."""
        await self._write(self.fixed_nodes.int_var, TaggedValue.uint32(self.state.counter))

    def stop(self) -> None:
        """Ask the loop to exit before its next tick."""
        self._stop_event.set()

    async def run(self, max_ticks: Optional[int] = None) -> None:
        """
        Tick until stopped.

        The stop signal is checked at the top of each tick; the running
        tick and the sleep after it are not interrupted.

        Args:
            max_ticks: Stop after this many ticks, None runs until stopped
        """
        log_info(
            f"Starting updates every {self.cycle_time_ms}ms "
            f"for {len(self.bulk_table)} bulk variables"
        )
        ticks = 0
        while not self.stop_requested:
            if max_ticks is not None and ticks >= max_ticks:
                break
            await self.tick()
            ticks += 1
            await asyncio.sleep(self.cycle_time_seconds)
        log_info(f"Updates stopped after {self.state.ticks} ticks")

    async def tick(self) -> None:
        """Run one update cycle."""
        started = time.perf_counter()
        state = self.state
        fixed = self.fixed_nodes

        counter = state.advance_counter()
        await self._write(fixed.int_var, TaggedValue.uint32(counter))

        await self._write(fixed.string_var, TaggedValue.string(format_event(counter)))

        await self._write(fixed.array_var, TaggedValue.int32_array(state.advance_array()))

        await self._write(fixed.bool_var, TaggedValue.boolean(state.flip_toggle()))

        for var_node in self.bulk_table:
            await self._increment(var_node)

        state.ticks += 1
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        log_debug(
            f"Tick {state.ticks}: counter={counter}, "
            f"{len(self.bulk_table)} bulk variables in {elapsed_ms:.1f}ms"
        )

    async def _increment(self, var_node: VariableNode) -> None:
        """Read a bulk variable, add one and write it back."""
        try:
            raw = await var_node.node.read_value()
            current = TypeConverter.from_opcua_value(ValueKind.INT32, raw)
        except Exception as e:
            self._handle_failure(var_node, e)
            return
        await self._write(var_node, TaggedValue.int32(wrap_int32(current.value + 1)))

    async def _write(self, var_node: VariableNode, value: TaggedValue) -> None:
        """Write a value to a node, applying the failure policy on error."""
        try:
            await var_node.node.write_value(TypeConverter.to_variant(value))
        except Exception as e:
            self._handle_failure(var_node, e)

    def _handle_failure(self, var_node: VariableNode, error: Exception) -> None:
        failure = WriteFailure(var_node.name, error)
        if self.failure_policy == FailurePolicy.FAIL_FAST:
            raise failure from error
        self.failed_writes += 1
        log_error(str(failure))
