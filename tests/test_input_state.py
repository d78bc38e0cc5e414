"""Unit tests for the InputLatch keypad."""

from c8emu.core.input_state import InputLatch


class TestKeys:

    def test_press_and_release(self):
        latch = InputLatch()
        latch.set_key(0xA, True)
        assert latch.is_pressed(0xA)
        assert latch.pressed_keys() == [0xA]
        latch.set_key(0xA, False)
        assert not latch.is_pressed(0xA)

    def test_out_of_range_keys_ignored(self):
        latch = InputLatch()
        assert latch.set_key(16, True) is None
        assert latch.set_key(-1, True) is None
        assert latch.is_pressed(16) is False
        assert latch.pressed_keys() == []

    def test_clear(self):
        latch = InputLatch()
        latch.set_key(1, True)
        latch.request_key(3)
        latch.clear()
        assert latch.pressed_keys() == []
        assert latch.waiting is False


class TestWaitForKey:

    def test_press_resolves_wait(self):
        writes = []
        latch = InputLatch(lambda reg, key: writes.append((reg, key)))
        latch.request_key(0x5)
        assert latch.waiting
        assert latch.waiting_register == 0x5

        assert latch.set_key(0xB, True) == 0x5
        assert writes == [(0x5, 0xB)]
        assert latch.waiting is False

    def test_release_does_not_resolve_wait(self):
        writes = []
        latch = InputLatch(lambda reg, key: writes.append((reg, key)))
        latch.request_key(2)
        assert latch.set_key(4, False) is None
        assert latch.waiting
        assert writes == []

    def test_only_first_press_resolves(self):
        writes = []
        latch = InputLatch(lambda reg, key: writes.append((reg, key)))
        latch.request_key(0)
        latch.set_key(1, True)
        latch.set_key(2, True)
        assert writes == [(0, 1)]

    def test_cancel_wait(self):
        latch = InputLatch()
        latch.request_key(7)
        latch.cancel_wait()
        assert latch.waiting is False
        assert latch.set_key(3, True) is None
