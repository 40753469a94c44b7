import numpy as np

from unittest import mock

from chipvm.audio import VOLUME_STEP, Tone, square_wave
from chipvm.config import MAX_VOLUME, Config


def test_square_wave():
    samples = square_wave(44100, 440, 3000)
    assert samples.dtype == np.int16, "Samples are not signed 16 bit."
    assert len(samples) == 44100, "Wave is not one second long."
    assert set(np.unique(samples)) == {-3000, 3000}, "Wave does not swing between the two amplitudes."

    half_period = 44100 // 440 // 2
    assert (samples[:half_period] == -3000).all(), "First half period is not low."
    assert (samples[half_period:2 * half_period] == 3000).all(), "Second half period is not high."


def test_square_wave_silent():
    assert not square_wave(8000, 440, 0).any(), "Wave with no volume is not silent."


@mock.patch("chipvm.audio.pygame")
class TestTone:
    def test_init_opens_mixer(self, mock_pygame):
        Tone(Config(sample_rate=22050))
        mock_pygame.mixer.init.assert_called_once_with(22050, -16, 1, 4096)
        mock_pygame.sndarray.make_sound.assert_called_once()

    def test_update_only_acts_on_changes(self, mock_pygame):
        tone = Tone(Config())
        sound = tone.sound_player

        tone.update(True)
        tone.update(True)
        sound.play.assert_called_once_with(-1)
        assert tone.playing, "Tone not marked as playing."

        tone.update(False)
        tone.update(False)
        sound.stop.assert_called_once()
        assert not tone.playing, "Tone still marked as playing."

    def test_change_volume(self, mock_pygame):
        tone = Tone(Config(volume=3000))
        tone.update(True)

        tone.change_volume(VOLUME_STEP)
        assert tone.volume == 3000 + VOLUME_STEP, "Volume not raised."
        assert mock_pygame.sndarray.make_sound.call_count == 2, "Wave not rebuilt for the new volume."
        assert tone.playing, "Tone stopped by a volume change."

        tone.change_volume(-10 * MAX_VOLUME)
        assert tone.volume == 0, "Volume not clamped to 0."

        tone.change_volume(10 * MAX_VOLUME)
        assert tone.volume == MAX_VOLUME, "Volume not clamped to the maximum."

    def test_change_volume_at_limit(self, mock_pygame):
        tone = Tone(Config(volume=MAX_VOLUME))
        tone.change_volume(VOLUME_STEP)
        assert mock_pygame.sndarray.make_sound.call_count == 1, "Wave rebuilt when the volume did not change."

    def test_stop(self, mock_pygame):
        tone = Tone(Config())
        tone.update(True)
        tone.stop()
        assert not tone.playing, "Tone not stopped."
