import pytest

from redcore.monitor import parse_proc_state, process_report
from redcore.page_allocator import PageAllocator
from redcore.scheduler import ProcessState, Scheduler
from redcore.textfmt import hex_string


@pytest.mark.parametrize(
    "state, label",
    [
        (ProcessState.STOPPED, "Stopped"),
        (ProcessState.READY, "Running"),
        (ProcessState.RUNNING, "Running"),
        (ProcessState.BLOCKED, "Running"),
        (7, "Invalid"),
    ],
)
def test_parse_proc_state(state, label):
    assert parse_proc_state(state) == label


@pytest.fixture
def setup():
    allocator = PageAllocator(0x100000, 0x200000)
    sched = Scheduler(allocator, lambda: 0)
    sched.init_main_process()
    return sched, allocator


def test_report_lists_live_processes(setup):
    sched, allocator = setup
    lines = process_report(sched, allocator)
    assert len(lines) == 5
    assert lines[0] == "Process [0]: kernel [pid = 1 | status = Running]"
    main = sched.processes[0]
    assert lines[1].startswith("Stack: " + hex_string(main.stack))
    assert lines[4] == "PC: " + hex_string(main.pc)


def test_report_counts_heap_usage(setup):
    sched, allocator = setup
    proc = sched.create_kernel_process("worker", lambda: None)
    allocator.allocate_in_page(proc.heap, 32)
    lines = process_report(sched, allocator)
    assert len(lines) == 10
    assert lines[7] == f"Heap: {hex_string(proc.heap)} ({hex_string(32)})"


def test_report_skips_stopped(setup):
    sched, allocator = setup
    proc = sched.create_kernel_process("worker", lambda: None)
    sched.create_kernel_process("other", lambda: None)
    sched.stop_process(proc.id)
    lines = process_report(sched, allocator)
    assert not any("worker" in line for line in lines)
    assert len(lines) == 10