# redcore

The building blocks of a small AArch64 hobby kernel, in plain Python. Each one
works on ordinary Python objects, so you can use it, look inside it and test it
without booting anything.

## Modules

- `redcore.textfmt`: string helpers in the kernel's style.
  - `hex_string` gives upper-case `0x...` output.
  - `bin_string` gives `0b...` output from a chosen top bit.
  - `tail`, `truncate` and `repeat` cut and build strings.
  - `kformat(fmt, args)` takes `%x %b %c %s %i`. It stops at the first
    conversion that has no argument left.
  - `format_string(fmt, *args)` adds `%f` and `%d`, which print six decimals.
    It raises `ValueError` when arguments run out.
  - Both formatters cut their result at 255 characters.
  - `strcmp`, `strstart`, `strend`, `strcont`, `memcmp` and `utf16_to_ascii`
    behave like the C-style routines they are named after.
- `redcore.geometry`: the dataclasses `Point`, `Size` and `Rect`, integer
  `lerp` and `sign`.
- `redcore.framebuffer`: `Framebuffer(width, height, stride=None, font=None)`.
  - It draws pixels, filled rectangles, Bresenham lines (`draw_line` returns a
    `Rect`), scaled 8x8 glyphs and multi-line strings (`draw_string` returns
    the `Size` the text covers).
  - Glyphs come from the `font` mapping you pass in. A character that is
    missing from it draws nothing.
  - Pixels outside the bounds are ignored, and `pixel(x, y)` reads one back.
  - `char_size(scale)` is `8 * scale`.
- `redcore.keys`: HID key codes (`Key`), modifier bits (`Modifier`),
  `KeyPress` reports of up to six keys with `contains(key, modifier)`, and
  `hid_to_char`.
- `redcore.label`: a `Label` dataclass.
  - It has `HorizontalAlignment` and `VerticalAlignment`.
  - `size()` and `position()` compute the layout, `render(framebuffer)` draws
    it, and `adapt_to_size()` fits the rectangle to the text.
- `redcore.relocator`: `Layout`, `disassemble` and `translate_instruction`.
  - `disassemble(instruction, pc)` describes a recognised instruction and
    returns `None` for any other.
  - `translate_instruction` re-encodes branches that leave the code and
    `adrp` instructions that point into the data section.
  - `relocate_code` applies that to a whole little-endian code blob.
- `redcore.elf`: `parse_elf(data)` decodes the ELF64 file header and the
  *first* program header into an `ElfImage`. `ElfImage.first_segment()`
  returns that segment's bytes and `ElfImage.entry` the entry offset.
- `redcore.memory`: a sparse, zero-filled `Memory`.
  - It has little-endian `read8`/`write8` through `read64`/`write64`, plus
    `read_bytes`, `write_bytes` and `fill`.
  - You can give it an optional `size`. Access beyond it raises `IndexError`.
- `redcore.temp_alloc`: two page-rounded allocators.
  - `TempAllocator` reuses freed blocks, taking the most recently freed first.
  - `MmioAllocator` is a bump allocator.
  - Both raise `AllocatorOverflow` when they are full.
  - `round_to_page` rounds a size up to 4 KiB.
- `redcore.page_allocator`: `PageAllocator` hands out 4 KiB pages.
  - It searches for pages in groups of 64.
  - It can call an optional `map_page(address, kernel, device)` for each page
    it hands out.
  - It keeps small in-page heaps (`HeapPage`), used through
    `allocate_in_page`, `free_from_page` and `heap_usage`.
  - It raises `OutOfMemoryError` when no run of pages fits.
- `redcore.page_tables`: `PageTables` with `map_2mb`, `map_4kb`, `unmap`,
  `lookup` and `describe`, plus `table_indices`.
  - Mapping a 4 KiB page inside an existing 2 MiB block raises
    `MappingError`.
  - Mapping a page that is already mapped returns `False`.
- `redcore.scheduler`: a 16-slot round-robin `Scheduler`.
  - It takes an injectable millisecond `clock`.
  - Its methods are `init_main_process`, `init_process`,
    `create_kernel_process`, `switch_proc`, `stop_process`, `sleep_process`
    and `wake_processes`.
  - It raises `SchedulerError` when the table cannot satisfy a request.
- `redcore.monitor`: `parse_proc_state` and `process_report(scheduler,
  page_allocator)`. The report gives five text lines per live process.
- `redcore.boot`: `BootStateMachine`.
  - It goes from bootscreen to login to desktop.
  - It starts each stage through the launcher you supply for it.
  - It moves on when the current stage's process has stopped.
- `redcore.desktop`: `Desktop(file_names, screen_size)`.
  - It is a 3x3 grid of `.elf` programs under `/redos/user/`.
  - `handle_key` moves the selection with the arrow keys and returns the
    selected `LaunchEntry` on Enter.
  - `tile_rect` gives the layout of a tile.
  - `find_extension` splits a file name at its first dot.

## Install

    pip install .

Run the tests:

    pip install .[test]
    pytest

## Examples

    from redcore.textfmt import format_string, hex_string

    hex_string(255)                          # '0xFF'
    format_string("pid %i at %x", 3, 4096)   # 'pid 3 at 0x1000'

Draw onto a framebuffer with a one-glyph font:

    from redcore.framebuffer import Framebuffer

    font = {ord("I"): [0x3C, 0x18, 0x18, 0x18, 0x18, 0x18, 0x3C, 0x00]}
    fb = Framebuffer(64, 32, font=font)
    fb.clear(0x000000)
    fb.draw_line(0, 0, 10, 5, 0xFFFFFF)
    fb.draw_string("I\nI", 20, 0, 1, 0xFFFFFF)   # Size(width=8, height=20)

Pick a program from the launcher grid:

    from redcore.desktop import Desktop
    from redcore.geometry import Size
    from redcore.keys import Key

    desktop = Desktop(["hello.elf", "notes.txt"], Size(640, 480))
    desktop.handle_key(Key.ENTER)
    # LaunchEntry(name='hello', ext='.elf', path='/redos/user/hello.elf')

Read an ELF executable:

    from redcore.elf import parse_elf

    with open("program.elf", "rb") as handle:
        image = parse_elf(handle.read())
    segment = image.first_segment()

## What it does not do

redcore models data structures and decisions. It does not run anything.

- Nothing boots, and no instructions execute. The scheduler keeps a process
  table and picks the next process, but it never runs one.
- Nothing touches real hardware, device drivers, interrupts or system calls.
- It reads no file system. The desktop is given its file names.
- There is no command-line program, no interactive screen and no built-in
  font. The boot, login and desktop screens are covered only by their logic:
  `BootStateMachine`, `keys` and `Desktop`.