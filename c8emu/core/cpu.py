"""
CHIP-8 interpreter for C8EMU.

Fetches, decodes and executes the 35 standard CHIP-8 instructions.  Every
instruction is two bytes, big-endian, and is split into these fields::

    group = opcode >> 12          high nibble, selects the handler
    x     = (opcode >> 8) & 0xF   first register index
    y     = (opcode >> 4) & 0xF   second register index
    n     = opcode & 0xF          4-bit immediate
    nn    = opcode & 0xFF         8-bit immediate
    nnn   = opcode & 0xFFF        12-bit address

Key behaviours:

* The PC is advanced past the instruction *before* dispatch, so CALL saves
  the address of the following instruction and skips add a further 2.
* ``8xy4``, ``8xy5`` and ``8xy7`` compute carry / no-borrow from the
  operands before the operation; the result is written first and VF last.
* ``8xy6`` and ``8xyE`` shift Vx in place and put the bit shifted out into
  VF.
* Unknown opcodes execute as no-ops.
* Memory and stack faults halt the interpreter and propagate.

Execution states (:class:`~c8emu.core.types.MachineState`):

* ``RUNNING`` -- :meth:`Interpreter.step` executes one instruction.
* ``WAITING_FOR_KEY`` -- entered by ``Fx0A``; left when the input latch
  resolves the wait.
* ``HALTED`` -- paused or faulted; left only through :meth:`resume` or a
  machine reset.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Dict, List, Optional

from c8emu.core.call_stack import CallStack
from c8emu.core.disassembler import disassemble
from c8emu.core.errors import MachineFault
from c8emu.core.frame_buffer import FrameBuffer
from c8emu.core.input_state import InputLatch
from c8emu.core.memory import Memory
from c8emu.core.registers import RegisterFile
from c8emu.core.timers import TimerUnit
from c8emu.core.types import FLAG_REGISTER, FONT_GLYPH_BYTES, FONT_START, MachineState

logger = logging.getLogger(__name__)

Handler = Callable[[int, int, int, int, int], None]


class Interpreter:
    """CHIP-8 fetch-decode-execute engine.

    Parameters
    ----------
    memory, registers, stack, frame_buffer, keypad, timers:
        The machine components the instructions operate on.  The
        interpreter does not own their lifecycle; the machine resets them.
    rng:
        Random source for ``Cxnn``.  Anything with a ``randrange`` method
        (``random.Random`` by default).
    trace:
        Log every executed instruction at DEBUG level.
    """

    def __init__(
        self,
        memory: Memory,
        registers: RegisterFile,
        stack: CallStack,
        frame_buffer: FrameBuffer,
        keypad: InputLatch,
        timers: TimerUnit,
        rng: Optional[random.Random] = None,
        trace: bool = False,
    ) -> None:
        self.mem = memory
        self.regs = registers
        self.stack = stack
        self.fb = frame_buffer
        self.keypad = keypad
        self.timers = timers
        self.rng: random.Random = rng if rng is not None else random.Random()
        self.trace: bool = trace

        # Control flags
        self.halted: bool = False
        self.last_fault: Optional[MachineFault] = None
        self.instruction_count: int = 0
        self._opcode: int = 0

        self._group_table: List[Handler] = self._build_group_table()
        self._alu_table: Dict[int, Handler] = self._build_alu_table()
        self._misc_table: Dict[int, Handler] = self._build_misc_table()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> MachineState:
        if self.halted:
            return MachineState.HALTED
        if self.keypad.waiting:
            return MachineState.WAITING_FOR_KEY
        return MachineState.RUNNING

    def reset(self) -> None:
        """Clear run-state; the machine resets the components."""
        self.halted = False
        self.last_fault = None
        self.instruction_count = 0

    def pause(self) -> None:
        self.halted = True

    def resume(self) -> None:
        self.halted = False

    # ------------------------------------------------------------------
    # Execute
    # ------------------------------------------------------------------

    def step(self) -> bool:
        """Execute one instruction.

        Returns:
            ``True`` if an instruction ran, ``False`` if the interpreter is
            halted or waiting for a key.

        Raises:
            MachineFault: On an out-of-bounds access or a stack fault.  The
                interpreter is halted before the fault propagates.
        """
        if self.halted or self.keypad.waiting:
            return False

        pc = self.regs.pc
        try:
            opcode = self.mem.read_word(pc)
            self.regs.advance_pc()
            if self.trace:
                logger.debug("%03X: %04X  %s", pc, opcode, disassemble(opcode))
            self.execute(opcode)
        except MachineFault as exc:
            self.halted = True
            self.last_fault = exc
            logger.error("Machine fault at PC=%03X: %s", pc, exc)
            raise

        self.instruction_count += 1
        return True

    def execute(self, opcode: int) -> None:
        """Decode and run *opcode*; the PC must already point past it."""
        x = (opcode >> 8) & 0xF
        y = (opcode >> 4) & 0xF
        n = opcode & 0xF
        nn = opcode & 0xFF
        nnn = opcode & 0xFFF
        self._opcode = opcode
        self._group_table[opcode >> 12](x, y, n, nn, nnn)

    # ==================================================================
    # Dispatch tables
    # ==================================================================

    def _build_group_table(self) -> List[Handler]:
        """One handler per high nibble."""
        return [
            self._op_0xxx,
            self._op_jp,
            self._op_call,
            self._op_se_imm,
            self._op_sne_imm,
            self._op_se_reg,
            self._op_ld_imm,
            self._op_add_imm,
            self._op_alu,
            self._op_sne_reg,
            self._op_ld_i,
            self._op_jp_v0,
            self._op_rnd,
            self._op_drw,
            self._op_key,
            self._op_misc,
        ]

    def _build_alu_table(self) -> Dict[int, Handler]:
        """``8xyN`` handlers keyed by N."""
        return {
            0x0: self._alu_ld,
            0x1: self._alu_or,
            0x2: self._alu_and,
            0x3: self._alu_xor,
            0x4: self._alu_add,
            0x5: self._alu_sub,
            0x6: self._alu_shr,
            0x7: self._alu_subn,
            0xE: self._alu_shl,
        }

    def _build_misc_table(self) -> Dict[int, Handler]:
        """``FxNN`` handlers keyed by NN."""
        return {
            0x07: self._f_ld_vx_dt,
            0x0A: self._f_ld_vx_k,
            0x15: self._f_ld_dt_vx,
            0x18: self._f_ld_st_vx,
            0x1E: self._f_add_i_vx,
            0x29: self._f_ld_f_vx,
            0x33: self._f_ld_b_vx,
            0x55: self._f_store,
            0x65: self._f_load,
        }

    def _unknown(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        logger.debug(
            "Unknown opcode %04X at %03X ignored",
            self._opcode,
            (self.regs.pc - 2) & 0xFFFF,
        )

    # ------------------------------------------------------------------
    # Group handlers
    # ------------------------------------------------------------------

    def _op_0xxx(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        if nnn == 0x0E0:
            self.fb.clear()
        elif nnn == 0x0EE:
            self.regs.pc = self.stack.pop()
        else:
            # 0nnn (machine-code SYS call) is not supported.
            self._unknown(x, y, n, nn, nnn)

    def _op_jp(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.pc = nnn

    def _op_call(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.stack.push(self.regs.pc)
        self.regs.pc = nnn

    def _op_se_imm(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        if self.regs.v[x] == nn:
            self.regs.skip()

    def _op_sne_imm(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        if self.regs.v[x] != nn:
            self.regs.skip()

    def _op_se_reg(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        if n != 0:
            self._unknown(x, y, n, nn, nnn)
            return
        if self.regs.v[x] == self.regs.v[y]:
            self.regs.skip()

    def _op_ld_imm(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.v[x] = nn

    def _op_add_imm(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        v = self.regs.v
        v[x] = (v[x] + nn) & 0xFF

    def _op_alu(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self._alu_table.get(n, self._unknown)(x, y, n, nn, nnn)

    def _op_sne_reg(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        if n != 0:
            self._unknown(x, y, n, nn, nnn)
            return
        if self.regs.v[x] != self.regs.v[y]:
            self.regs.skip()

    def _op_ld_i(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.index = nnn

    def _op_jp_v0(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.pc = nnn + self.regs.v[0]

    def _op_rnd(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.v[x] = self.rng.randrange(256) & nn

    def _op_drw(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        v = self.regs.v
        sprite = self.mem.dump(self.regs.index, n)
        collision = self.fb.draw_sprite(v[x], v[y], sprite)
        v[FLAG_REGISTER] = 1 if collision else 0

    def _op_key(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        key = self.regs.v[x]
        if nn == 0x9E:
            if self.keypad.is_pressed(key):
                self.regs.skip()
        elif nn == 0xA1:
            if not self.keypad.is_pressed(key):
                self.regs.skip()
        else:
            self._unknown(x, y, n, nn, nnn)

    def _op_misc(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self._misc_table.get(nn, self._unknown)(x, y, n, nn, nnn)

    # ------------------------------------------------------------------
    # 8xyN -- register arithmetic
    # ------------------------------------------------------------------

    def _alu_ld(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.v[x] = self.regs.v[y]

    def _alu_or(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.v[x] |= self.regs.v[y]

    def _alu_and(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.v[x] &= self.regs.v[y]

    def _alu_xor(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.v[x] ^= self.regs.v[y]

    def _alu_add(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        v = self.regs.v
        total = v[x] + v[y]
        v[x] = total & 0xFF
        v[FLAG_REGISTER] = 1 if total > 0xFF else 0

    def _alu_sub(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        v = self.regs.v
        vx, vy = v[x], v[y]
        v[x] = (vx - vy) & 0xFF
        v[FLAG_REGISTER] = 1 if vx > vy else 0

    def _alu_shr(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        v = self.regs.v
        vx = v[x]
        v[x] = vx >> 1
        v[FLAG_REGISTER] = vx & 0x01

    def _alu_subn(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        v = self.regs.v
        vx, vy = v[x], v[y]
        v[x] = (vy - vx) & 0xFF
        v[FLAG_REGISTER] = 1 if vy > vx else 0

    def _alu_shl(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        v = self.regs.v
        vx = v[x]
        v[x] = (vx << 1) & 0xFF
        v[FLAG_REGISTER] = (vx >> 7) & 0x01

    # ------------------------------------------------------------------
    # FxNN -- timers, keypad wait, index and block transfers
    # ------------------------------------------------------------------

    def _f_ld_vx_dt(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.v[x] = self.timers.get_delay()

    def _f_ld_vx_k(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.keypad.request_key(x)

    def _f_ld_dt_vx(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.timers.set_delay(self.regs.v[x])

    def _f_ld_st_vx(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.timers.set_sound(self.regs.v[x])

    def _f_add_i_vx(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.index = self.regs.index + self.regs.v[x]

    def _f_ld_f_vx(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        self.regs.index = FONT_START + self.regs.v[x] * FONT_GLYPH_BYTES

    def _f_ld_b_vx(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        value = self.regs.v[x]
        i = self.regs.index
        self.mem.write(i, value // 100)
        self.mem.write(i + 1, (value // 10) % 10)
        self.mem.write(i + 2, value % 10)

    def _f_store(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        i = self.regs.index
        for j in range(x + 1):
            self.mem.write(i + j, self.regs.v[j])

    def _f_load(self, x: int, y: int, n: int, nn: int, nnn: int) -> None:
        i = self.regs.index
        for j in range(x + 1):
            self.regs.v[j] = self.mem.read(i + j)

    def __repr__(self) -> str:
        return (
            f"Interpreter(state={self.state.name}, "
            f"pc=0x{self.regs.pc:03X}, "
            f"instructions={self.instruction_count})"
        )
