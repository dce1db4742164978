#
# MIT License
#
# (C) Copyright 2026 Hewlett Packard Enterprise Development LP
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included
# in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL
# THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR
# OTHER LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE,
# ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR
# OTHER DEALINGS IN THE SOFTWARE.
#
"""
The subcommands of the powerinv command line interface.

Each subpackage is one subcommand. Its `parser` module defines exactly one
`add_<subcommand>_subparser` function, and its `main` module defines
`do_<subcommand>`, which is called with the parsed arguments.
"""

import importlib
import inspect
import pkgutil


def get_avail_subcommands():
    """Get the names of the subcommand subpackages, sorted."""
    return sorted(name for _, name, is_pkg in pkgutil.iter_modules(__path__) if is_pkg)


def _get_subparser_builder(subcommand):
    """Import the parser module of a subcommand and get its add_*_subparser function.

    Raises:
        RuntimeError: if the module does not have exactly one such function.
    """
    module = importlib.import_module(f'{__name__}.{subcommand}.parser')
    builders = [func for name, func in inspect.getmembers(module, inspect.isfunction)
                if name.startswith('add_') and name.endswith('_subparser')]
    if len(builders) != 1:
        raise RuntimeError(f'Expected exactly one add_*_subparser function in '
                           f'{module.__name__}, found {len(builders)}.')
    return builders[0]


def build_out_subparsers(subparsers):
    """Add the subparser of every subcommand.

    Args:
        subparsers: the object returned by ArgumentParser.add_subparsers().

    Returns:
        None
    """
    for subcommand in get_avail_subcommands():
        _get_subparser_builder(subcommand)(subparsers)
