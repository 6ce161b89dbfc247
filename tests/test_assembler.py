import pytest

from vitae.assembler import AssemblyError, assemble
from vitae.builtins import install, print_args
from vitae.opcodes import Opcode as Op
from vitae.opcodes import ValueType as T
from vitae.vm import VM


def test_mnemonics_become_opcodes():
    assert assemble("pushc,type_inumber,7,halt,", VM()) == [Op.PUSHC, T.INUMBER, 7, Op.HALT]


def test_text_after_last_comma_is_ignored():
    assert assemble("halt,pushc", VM()) == [Op.HALT]


def test_whitespace_around_words_is_ignored():
    assert assemble("halt,\n", VM()) == [Op.HALT]


def test_float_and_negative_integer_words():
    words = assemble("pushc,type_number,2.5,dloadc,-3,halt,", VM())
    assert words[2] == 2.5
    assert words[4] == -3


def test_string_constant_is_shared_object():
    words = assemble('^s0="hello world",pushc,type_string,#s0,pushc,type_string,#s0,halt,', VM())
    assert words[2] == "hello world"
    assert words[2] is words[5]


def test_function_constant_resolves_registered_function():
    vm = VM()
    install(vm)
    words = assemble('^f0="print",call_extern,#f0,1,halt,', vm)
    assert words[1] is print_args


def test_function_constants_counted_in_declaration_order():
    vm = VM()
    install(vm)
    words = assemble('^f5="print",^f9="test",call_extern,#f0,1,halt,', vm)
    assert words[1] is print_args


def test_unknown_function_raises():
    with pytest.raises(AssemblyError):
        assemble('^f0="missing",call_extern,#f0,1,halt,', VM())


def test_undefined_string_constant_raises():
    with pytest.raises(AssemblyError):
        assemble("pushc,type_string,#s3,halt,", VM())


def test_unknown_word_raises():
    with pytest.raises(AssemblyError):
        assemble("bogus,halt,", VM())


def test_empty_word_raises():
    with pytest.raises(AssemblyError):
        assemble("halt,,", VM())


def test_malformed_constant_raises():
    with pytest.raises(AssemblyError):
        assemble('^s0="unterminated,halt,', VM())


def test_assembled_program_runs():
    vm = VM()
    vm.run(assemble("pushc,type_inumber,4,dstorec,0,dloadc,0,halt,", vm))
    assert vm.stack[: vm.sp] == [vm.stack[0]]
    assert vm.stack[0].value == 4