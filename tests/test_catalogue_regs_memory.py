"""
cyclesim - Data Model Tests

Catalogue integrity, register-file validation / display, memory bounds
policy and phase narration.
"""

import pytest

from cyclesim.cpu import catalogue
from cyclesim.cpu.catalogue import (
    CATALOGUE, CatalogueError, Instruction, InstructionType, UnknownInstruction,
    build_catalogue,
)
from cyclesim.cpu.regs import (
    REQUIRED_REGISTERS, RegisterStateError, display, initial_registers,
    validate_registers,
)
from cyclesim.cpu.step import ExecutionPhase, Phase
from cyclesim.mem.memory import Memory, MemoryOutOfBounds, parse_address, read_cell
from cyclesim.sim.narration import phase_narration


class TestCatalogue:

    def test_size_and_ids(self):
        assert len(CATALOGUE) == 25
        assert sorted(i.id for i in CATALOGUE) == list(range(1, 26))

    def test_mnemonics_unique(self):
        assert len({i.mnemonic for i in CATALOGUE}) == len(CATALOGUE)

    def test_instruction_is_immutable(self):
        instr = catalogue.find('RET')
        with pytest.raises(AttributeError):
            instr.mnemonic = 'NOP'

    def test_find(self):
        instr = catalogue.find('ADD AX, BX')
        assert instr.type is InstructionType.ARITHMETIC
        assert instr.operands == 2
        assert instr.beginner_explanation

    def test_find_unknown(self):
        with pytest.raises(UnknownInstruction):
            catalogue.find('NOP')

    def test_find_is_exact(self):
        with pytest.raises(UnknownInstruction):
            catalogue.find('add ax, bx')

    def test_get(self):
        assert catalogue.get(catalogue.find('RET').id).mnemonic == 'RET'
        with pytest.raises(UnknownInstruction):
            catalogue.get(999)

    def test_by_type_order_and_coverage(self):
        groups = catalogue.by_type()
        assert list(groups) == [
            InstructionType.ARITHMETIC, InstructionType.LOGICAL, InstructionType.DATA,
            InstructionType.CONTROL, InstructionType.IO]
        assert sum(len(g) for g in groups.values()) == len(CATALOGUE)
        assert [i.mnemonic for i in groups[InstructionType.IO]] == ['IN AX, 60h', 'OUT 61h, AL']

    def test_duplicate_mnemonic_rejected(self):
        entry = (1, 'RET', 'Return', InstructionType.CONTROL, 0, None)
        with pytest.raises(CatalogueError):
            build_catalogue([entry, (2,) + entry[1:]])

    def test_duplicate_id_rejected(self):
        with pytest.raises(CatalogueError):
            build_catalogue([
                (1, 'RET', 'Return', InstructionType.CONTROL, 0, None),
                (1, 'NOP', 'Nothing', InstructionType.CONTROL, 0, None),
            ])

    def test_every_category_labelled(self):
        assert set(catalogue.CATEGORY_LABELS) == set(InstructionType)
        assert set(catalogue.CATEGORY_DESCRIPTIONS) == set(InstructionType)


class TestRegisters:

    def test_initial_registers(self):
        regs = initial_registers()
        assert tuple(regs) == REQUIRED_REGISTERS
        assert all(v == 0 for v in regs.values())

    def test_initial_registers_overrides(self):
        assert initial_registers(SP=62)['SP'] == 62

    def test_missing_keys_listed(self):
        with pytest.raises(RegisterStateError, match='PC, SP'):
            validate_registers({'AX': 0, 'BX': 0, 'CX': 0, 'DX': 0, 'FLAGS': 0})

    def test_bool_rejected(self):
        with pytest.raises(RegisterStateError):
            validate_registers(dict(initial_registers(), FLAGS=True))

    def test_not_a_mapping(self):
        with pytest.raises(RegisterStateError):
            validate_registers([0] * 7)

    def test_extra_keys_allowed(self):
        validate_registers(dict(initial_registers(), IP=3))

    def test_display(self):
        text = display(initial_registers(AX=42, FLAGS=1))
        assert text.startswith('AX=002A BX=0000')
        assert 'FLAGS=[Z]' in text

    def test_display_negative_and_extra(self):
        text = display(dict(initial_registers(BX=-1), IP=16))
        assert 'BX=-0001' in text
        assert text.endswith('IP=0010')
        assert 'FLAGS=[.]' in text


class TestMemory:

    def test_default_size(self):
        mem = Memory()
        assert len(mem) == 64
        assert mem.cells() == [0] * 64

    def test_read_out_of_range_is_zero(self):
        mem = Memory(4)
        assert mem.read(100) == 0
        assert mem.read(-1) == 0

    def test_read_cell_plain_list(self):
        assert read_cell([4, 5], 1) == 5
        assert read_cell([4, 5], 2) == 0
        assert read_cell([4, 5], -1) == 0

    def test_write_grows(self):
        mem = Memory(4)
        mem.write(10, 7)
        assert len(mem) == 11
        assert mem[10] == 7
        assert mem[9] == 0

    def test_negative_write_raises(self):
        with pytest.raises(MemoryOutOfBounds):
            Memory(4).write(-2, 1)

    def test_out_of_bounds_is_index_error(self):
        assert issubclass(MemoryOutOfBounds, IndexError)

    def test_apply_changes(self):
        mem = Memory(8)
        mem.apply_changes({'1': 5, '6': 9})
        assert mem.cells() == [0, 5, 0, 0, 0, 0, 9, 0]

    def test_parse_address(self):
        assert parse_address('200') == 200
        assert parse_address(8) == 8
        with pytest.raises(ValueError):
            parse_address('0x10')

    def test_diff(self):
        mem = Memory(4)
        before = mem.snapshot()
        mem.write(2, 5)
        mem.write(6, 1)
        assert Memory.diff(before, mem.snapshot()) == {2: (0, 5), 6: (0, 1)}

    def test_from_cells_and_equality(self):
        mem = Memory.from_cells([1, 2, 3])
        assert mem == [1, 2, 3]
        assert mem == Memory.from_cells([1, 2, 3])
        assert list(mem) == [1, 2, 3]

    def test_hexdump(self):
        mem = Memory(16)
        mem.write(9, 0x2A)
        lines = mem.hexdump().splitlines()
        assert len(lines) == 2
        assert lines[1] == '0008  0000 002A 0000 0000 0000 0000 0000 0000'

    def test_negative_size_rejected(self):
        with pytest.raises(ValueError):
            Memory(-1)


class TestNarration:

    def test_no_instruction(self):
        assert phase_narration(Phase.FETCH, None) == ""

    def test_decode_mentions_mnemonic(self):
        text = phase_narration(Phase.DECODE, catalogue.find('RET'))
        assert '"RET"' in text

    def test_execute_uses_beginner_explanation(self):
        instr = catalogue.find('MOV AX, 42')
        assert instr.beginner_explanation in phase_narration(Phase.EXECUTE, instr)

    def test_execute_falls_back_to_description(self):
        instr = Instruction(99, 'NOP', 'Do nothing', InstructionType.CONTROL, 0)
        assert phase_narration(Phase.EXECUTE, instr).endswith('Do nothing')

    def test_idle(self):
        text = phase_narration(ExecutionPhase.IDLE, catalogue.find('RET'))
        assert 'waiting' in text

    def test_every_phase_narrated(self):
        instr = catalogue.find('PUSH AX')
        for phase in Phase:
            assert phase_narration(phase, instr)
