"""Round-robin process table with sleeping and kernel process creation."""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import IntEnum

from redcore.keys import KeyPress
from redcore.page_allocator import PageAllocator

_log = logging.getLogger(__name__)

MAX_PROCS = 16
MAX_PROC_NAME_LENGTH = 256
INPUT_BUFFER_CAPACITY = 64
REGISTER_COUNT = 31
KERNEL_STACK_SIZE = 0x1000
KERNEL_SPSR = 0x205


class ProcessState(IntEnum):
    STOPPED = 0
    READY = 1
    RUNNING = 2
    BLOCKED = 3


class SwitchReason(IntEnum):
    INTERRUPT = 0
    YIELD = 1
    HALT = 2


class SchedulerError(RuntimeError):
    """Raised when the process table cannot satisfy a request."""


def _new_input_buffer() -> deque[KeyPress]:
    return deque(maxlen=INPUT_BUFFER_CAPACITY)


@dataclass
class Process:
    """One slot of the process table."""

    id: int = 0
    name: str = ""
    state: ProcessState = ProcessState.STOPPED
    regs: list[int] = field(default_factory=lambda: [0] * REGISTER_COUNT)
    sp: int = 0
    pc: int = 0
    spsr: int = 0
    stack: int = 0
    stack_size: int = 0
    heap: int = 0
    focused: bool = False
    entry: Callable[[], object] | int | None = None
    input_buffer: deque[KeyPress] = field(default_factory=_new_input_buffer)


@dataclass(frozen=True)
class _Sleeper:
    pid: int
    timestamp: int
    sleep_time: int

    @property
    def wake_time(self) -> int:
        return self.timestamp + self.sleep_time


def _monotonic_msec() -> int:
    return int(time.monotonic() * 1000)


class Scheduler:
    """A fixed table of ``MAX_PROCS`` processes scheduled round robin.

    ``clock`` returns the current time in milliseconds.
    """

    def __init__(
        self,
        page_allocator: PageAllocator,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.page_allocator = page_allocator
        self.clock = clock or _monotonic_msec
        self.processes = [Process() for _ in range(MAX_PROCS)]
        self.current_index = 0
        self.proc_count = 0
        self.next_proc_index = 1
        self.kernel_sp = 0
        self.timer_deadline: int | None = None
        self._sleeping: list[_Sleeper] = []

    def _reset(self, proc: Process) -> None:
        if proc.stack:
            self.page_allocator.free_page(proc.stack - proc.stack_size)
        proc.sp = 0
        proc.pc = 0
        proc.spsr = 0
        proc.regs = [0] * REGISTER_COUNT
        proc.name = ""
        proc.entry = None
        proc.input_buffer = _new_input_buffer()

    def init_main_process(self) -> Process:
        """Set up slot 0 as the blocked kernel process."""
        proc = self.processes[0]
        self._reset(proc)
        proc.id = self.next_proc_index
        self.next_proc_index += 1
        proc.state = ProcessState.BLOCKED
        proc.heap = self.page_allocator.alloc_page(0x1000, True, False, False)
        proc.stack_size = 0x1000
        proc.stack = self.page_allocator.alloc_page(proc.stack_size, True, False, True)
        self.kernel_sp = proc.stack + proc.stack_size
        proc.sp = self.kernel_sp
        self.name_process(proc, "kernel")
        self.proc_count += 1
        return proc

    def init_process(self) -> Process:
        """Claim a slot for a new ready process."""
        if self.next_proc_index >= MAX_PROCS:
            for proc in self.processes:
                if proc.state == ProcessState.STOPPED:
                    break
            else:
                raise SchedulerError("Out of process memory")
        else:
            proc = self.processes[self.next_proc_index]
        self._reset(proc)
        proc.id = self.next_proc_index
        self.next_proc_index += 1
        proc.state = ProcessState.READY
        self.proc_count += 1
        return proc

    def name_process(self, proc: Process, name: str) -> None:
        proc.name = name.split("\0", 1)[0][:MAX_PROC_NAME_LENGTH]

    def create_kernel_process(self, name: str, entry: Callable[[], object] | int) -> Process:
        """Create a ready kernel process with its own stack and heap pages."""
        proc = self.init_process()
        self.name_process(proc, name)
        stack = self.page_allocator.alloc_page(KERNEL_STACK_SIZE, True, False, False)
        heap = self.page_allocator.alloc_page(KERNEL_STACK_SIZE, True, False, False)
        proc.stack = stack + KERNEL_STACK_SIZE
        proc.stack_size = KERNEL_STACK_SIZE
        proc.heap = heap
        proc.sp = proc.stack
        proc.entry = entry
        proc.pc = entry if isinstance(entry, int) else 0
        proc.spsr = KERNEL_SPSR
        proc.state = ProcessState.READY
        _log.debug(
            "kernel process %s: stack at %#x, heap at %#x", name, proc.sp, proc.heap
        )
        return proc

    def switch_proc(self, reason: SwitchReason) -> Process:
        """Move to the next ready process after the current one and return it."""
        if self.proc_count == 0:
            raise SchedulerError("No processes active")
        for step in range(1, MAX_PROCS + 1):
            index = (self.current_index + step) % MAX_PROCS
            if self.processes[index].state == ProcessState.READY:
                self.current_index = index
                return self.processes[index]
        raise SchedulerError("No process is ready to run")

    def get_proc_by_pid(self, pid: int) -> Process | None:
        return next((proc for proc in self.processes if proc.id == pid), None)

    def current(self) -> Process:
        return self.processes[self.current_index]

    def process_count(self) -> int:
        return self.proc_count

    def stop_process(self, pid: int) -> Process | None:
        """Stop a ready process and switch away; returns the next process.

        A process that is not ready is left alone and None is returned.
        """
        proc = self.get_proc_by_pid(pid)
        if proc is None:
            raise SchedulerError(f"no process with pid {pid}")
        if proc.state != ProcessState.READY:
            return None
        proc.state = ProcessState.STOPPED
        proc.focused = False
        self.proc_count -= 1
        return self.switch_proc(SwitchReason.HALT)

    def stop_current_process(self) -> Process | None:
        return self.stop_process(self.current().id)

    def timer_remaining(self) -> int:
        """Milliseconds until the wake-up timer fires; 0 when it is idle."""
        if self.timer_deadline is None:
            return 0
        return max(self.timer_deadline - self.clock(), 0)

    def sleep_process(self, msec: int) -> Process:
        """Block the current process for ``msec`` and switch to the next one."""
        now = self.clock()
        if len(self._sleeping) < MAX_PROCS:
            proc = self.current()
            proc.state = ProcessState.BLOCKED
            self._sleeping.append(_Sleeper(proc.id, now, msec))
        remaining = self.timer_remaining()
        if remaining > msec or remaining == 0:
            self.timer_deadline = now + msec
        return self.switch_proc(SwitchReason.YIELD)

    def wake_processes(self) -> list[Process]:
        """Make every process whose sleep is over ready again and return them."""
        now = self.clock()
        woken: list[Process] = []
        still: list[_Sleeper] = []
        for sleeper in self._sleeping:
            if sleeper.wake_time <= now:
                proc = self.get_proc_by_pid(sleeper.pid)
                if proc is not None:
                    proc.state = ProcessState.READY
                    woken.append(proc)
            else:
                still.append(sleeper)
        self._sleeping = still
        self.timer_deadline = min((s.wake_time for s in still), default=None)
        return woken