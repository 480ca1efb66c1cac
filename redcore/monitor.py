"""Textual reports about the processes in the table."""

from __future__ import annotations

from redcore.page_allocator import PageAllocator
from redcore.scheduler import ProcessState, Scheduler
from redcore.textfmt import format_string


def parse_proc_state(state: int) -> str:
    """Return the label shown for a process state."""
    try:
        state = ProcessState(state)
    except ValueError:
        return "Invalid"
    return "Stopped" if state == ProcessState.STOPPED else "Running"


def _heap_usage(page_allocator: PageAllocator, heap: int) -> int:
    if heap not in page_allocator.heap_pages:
        return 0
    return page_allocator.heap_usage(heap)


def process_report(scheduler: Scheduler, page_allocator: PageAllocator) -> list[str]:
    """Describe every live process in five lines each."""
    lines: list[str] = []
    for index, proc in enumerate(scheduler.processes):
        if proc.id == 0 or proc.state == ProcessState.STOPPED:
            continue
        lines.append(
            format_string(
                "Process [%i]: %s [pid = %i | status = %s]",
                index, proc.name, proc.id, parse_proc_state(proc.state),
            )
        )
        lines.append(
            format_string("Stack: %x (%x). SP: %x", proc.stack, proc.stack_size, proc.sp)
        )
        lines.append(
            format_string("Heap: %x (%x)", proc.heap, _heap_usage(page_allocator, proc.heap))
        )
        lines.append(format_string("Flags: %x", proc.spsr))
        lines.append(format_string("PC: %x", proc.pc))
    return lines