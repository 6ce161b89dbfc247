# vitae

`vitae` is a small stack-based virtual machine. Programs are written as a
flat, comma-separated list of words (an assembly text), turned into a list
of code words by an assembler, and executed by a VM that has:

- integer, float, string, table and nil values with mixed-type arithmetic
  and comparison (integers wrap at 64 bits, integer division truncates,
  division or remainder by zero gives zero),
- a value stack plus a separate frame stack for `call` / `ret` / `retv`,
- tables that combine an array part with a hash part, including a backlog
  for large integer keys that move into the array once it has grown to hold
  them,
- host functions reachable through `call_extern`,
- a mark-and-sweep collector that runs after every instruction.

## Installation

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## The assembly format

A program opens with its constant declarations, followed by comma-separated
words. Every word, including the last one, ends with a comma; text after the
last comma is ignored.

- `^s<N>="text"` declares string constant number `N`.
- `^f<N>="name"` declares an external function by name. Function constants
  are numbered in the order they are declared.
- `#s<N>` refers to a string constant, `#f<N>` to an external function,
  which must already be registered on the VM when the text is assembled.
- An opcode mnemonic or a value type name (`type_inumber`, `type_number`,
  `type_string`) is replaced by its number, a word holding a `.` is a float,
  and anything else is read as an integer.

Text that cannot be assembled raises `vitae.assembler.AssemblyError`.

Example, which pushes two integers, adds them, and prints the result:

```
^f0="print",pushc,type_inumber,40,pushc,type_inumber,2,add,call_extern,#f0,1,halt,
```

The instructions the VM executes are `pushc`, `add`, `sub`, `mul`, `div`,
`mod`, `eql`, `grt`, `lss`, `jmp`, `jmpr`, `jmpt`, `jmpf`, `alloc`, `get`,
`set`, `dpushc`, `dstorec`, `dloadc`, `table_access`, `table_set`, `call`,
`call_extern`, `ret`, `retv` and `halt`. A run stops at `halt`; errors such
as stack underflow, a bad operand or a jump outside the code raise
`vitae.vm.VMError`.

## Command line

```
vitae [program] [--demo]
```

`program` is the assembly file to run (default `./test.rpn`). The command
installs the standard external functions, assembles and runs the file, then
prints the first ten slots of the value stack and a report from a final
mark-and-sweep pass. With `--demo` it instead fills a small table with mixed
keys and prints its array part, its hash part and the objects the collector
tracks. Errors are reported on standard error with exit status 2.

## Using it from Python

```python
from vitae.vm import VM
from vitae.assembler import assemble
from vitae.builtins import install

vm = VM()
install(vm)          # registers test, print, create_table and print_hash
code = assemble(
    '^f0="print",pushc,type_inumber,40,pushc,type_inumber,2,add,'
    'call_extern,#f0,1,halt,',
    vm,
)
vm.run(code)         # writes 42 to vm.out
```

`VM(stack_size=256, out=None)` writes program output to `out`, standard
output by default. The standard external functions in `vitae.builtins` are:

- `test` (`sum_args`): replaces its arguments with their integer sum,
- `print` (`print_args`): writes its arguments, deepest first,
- `create_table`: builds a table from key/value pairs and pushes it,
- `print_hash`: writes a description and the hash part of a table.

Host functions take the VM and an argument count. They read their
arguments with `vm.arg(argc, index)` or `vm.pop()`, remove them with
`vm.drop(argc)`, and may leave a result with `vm.push(element)`:

```python
from vitae.elements import Element
from vitae.opcodes import ValueType

def double(vm, argc):
    value = vm.pop()
    vm.push(Element(ValueType.INUMBER, value.value * 2))

vm.register("double", double)
```

Lower-level pieces are usable on their own: `vitae.elements` for the tagged
`Element` values and their operators (`add`, `sub`, `mul`, `div`, `mod`,
`equal`, `less`, `greater`), `vitae.table.Table` for the array/hash table,
`vitae.hashtable.HashTable` for the chained hash table,
`vitae.sparse_stack.SparseStack`, `vitae.text.VString`, and
`vitae.gc.Collector` for tracking and sweeping objects.

## What it does not do

- There is no compiler from a higher-level language; programs are written
  in the assembly text directly.
- The mnemonics `pop`, `dset`, `dget`, `nql`, `concat` and `table_alloc`
  are accepted by the assembler, but the VM raises `VMError` when it meets
  them.