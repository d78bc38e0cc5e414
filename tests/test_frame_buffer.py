"""Unit tests for the XOR-compositing FrameBuffer."""

import pytest

from c8emu.core.frame_buffer import FrameBuffer


class TestDrawSprite:

    def test_single_pixel(self):
        fb = FrameBuffer()
        collision = fb.draw_sprite(3, 2, [0x80])
        assert collision is False
        assert fb.pixel(3, 2) == 1
        assert fb.lit_count() == 1

    def test_msb_is_leftmost(self):
        fb = FrameBuffer()
        fb.draw_sprite(0, 0, [0b10100001])
        assert [fb.pixel(x, 0) for x in range(8)] == [1, 0, 1, 0, 0, 0, 0, 1]

    def test_horizontal_wraparound(self):
        fb = FrameBuffer()
        fb.draw_sprite(63, 0, [0xC0])
        assert fb.pixel(63, 0) == 1
        assert fb.pixel(0, 0) == 1
        assert fb.lit_count() == 2

    def test_vertical_wraparound(self):
        fb = FrameBuffer()
        fb.draw_sprite(0, 31, [0x80, 0x80])
        assert fb.pixel(0, 31) == 1
        assert fb.pixel(0, 0) == 1

    def test_origin_beyond_grid_wraps(self):
        fb = FrameBuffer()
        fb.draw_sprite(64 + 5, 32 + 1, [0x80])
        assert fb.pixel(5, 1) == 1

    def test_collision_reported_when_lit_pixel_cleared(self):
        fb = FrameBuffer()
        fb.draw_sprite(10, 10, [0x80])
        assert fb.draw_sprite(10, 10, [0xC0]) is True
        assert fb.pixel(10, 10) == 0
        assert fb.pixel(11, 10) == 1

    def test_no_collision_for_disjoint_sprites(self):
        fb = FrameBuffer()
        fb.draw_sprite(0, 0, [0xF0])
        assert fb.draw_sprite(0, 0, [0x0F]) is False

    @pytest.mark.parametrize("origin", [(0, 0), (60, 30), (63, 31), (17, 9)])
    def test_xor_involution(self, origin):
        fb = FrameBuffer()
        fb.draw_sprite(5, 5, [0xFF, 0x81, 0xFF])
        before = fb.snapshot()
        sprite = [0xF0, 0x90, 0xF0, 0x90, 0x90]

        first = fb.draw_sprite(origin[0], origin[1], sprite)
        second = fb.draw_sprite(origin[0], origin[1], sprite)

        assert fb.snapshot() == before
        # The sprite lands on blank cells, so only the second draw collides.
        assert first is False
        assert second is True

    def test_second_draw_reports_first_draws_collision(self):
        fb = FrameBuffer()
        fb.draw_sprite(0, 0, [0x80])
        assert fb.draw_sprite(0, 0, [0x80]) is True
        assert fb.draw_sprite(0, 0, [0x80]) is False

    def test_empty_sprite(self):
        fb = FrameBuffer()
        assert fb.draw_sprite(0, 0, []) is False
        assert fb.lit_count() == 0


class TestBufferManagement:

    def test_clear_then_snapshot_all_unlit(self):
        fb = FrameBuffer()
        fb.draw_sprite(0, 0, [0xFF] * 15)
        fb.clear()
        snap = fb.snapshot()
        assert len(snap) == 32 * 64
        assert not any(snap)
        assert len(fb.cells) == fb.size

    def test_snapshot_is_a_copy(self):
        fb = FrameBuffer()
        snap = fb.snapshot()
        fb.draw_sprite(0, 0, [0x80])
        assert snap[0] == 0

    def test_dirty_flag(self):
        fb = FrameBuffer()
        assert fb.consume_dirty() is False
        fb.draw_sprite(0, 0, [0x80])
        assert fb.consume_dirty() is True
        assert fb.consume_dirty() is False
        fb.clear()
        assert fb.dirty is True

    def test_pixel_out_of_range(self):
        with pytest.raises(IndexError):
            FrameBuffer().pixel(64, 0)

    def test_invalid_dimensions(self):
        with pytest.raises(ValueError):
            FrameBuffer(0, 32)

    def test_involution_over_overlapping_sprite(self):
        fb = FrameBuffer()
        fb.draw_sprite(4, 4, [0xFF, 0xFF])
        before = fb.snapshot()
        assert fb.draw_sprite(6, 5, [0xF0, 0x0F]) is True
        fb.draw_sprite(6, 5, [0xF0, 0x0F])
        assert fb.snapshot() == before
