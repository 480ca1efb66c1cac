[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "redcore"
version = "0.1.0"
description = "Core pieces of a small AArch64 hobby kernel as a plain Python library: text formatting, framebuffer drawing, allocators, page tables, code relocation, ELF parsing and a round-robin scheduler model."
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "scheduler", "allocator", "page-tables", "framebuffer", "elf", "aarch64"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["redcore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
