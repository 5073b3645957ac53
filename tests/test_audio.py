import wave

from tickdown import audio, config
from tickdown.audio import SoundPlayer


def test_available_sounds_are_ordered_and_include_default(tmp_path):
    player = SoundPlayer(tmp_path)
    sounds = player.available_sounds()

    assert sounds[0] == config.DEFAULT_ALARM_SOUND
    assert sounds[-1] == audio.BEEP
    assert len(sounds) == len(set(sounds))


def test_unknown_sound_falls_back_to_default(tmp_path):
    (tmp_path / "Alarm01.wav").write_bytes(b"RIFF")
    player = SoundPlayer(tmp_path)

    assert player.resolve("No Such Sound") == str(tmp_path / "Alarm01.wav")


def test_missing_file_falls_back_to_beep(tmp_path, monkeypatch):
    monkeypatch.setattr(audio.tempfile, "gettempdir", lambda: str(tmp_path))
    player = SoundPlayer(tmp_path / "no-media")

    assert player.resolve("Ding") == str(tmp_path / "tickdown_beep.wav")
    assert player.resolve(config.DEFAULT_ALARM_SOUND) == str(tmp_path / "tickdown_beep.wav")


def test_nothing_playable_is_ignored(tmp_path, monkeypatch):
    def unwritable():
        raise OSError("read-only")

    monkeypatch.setattr(audio, "ensure_beep_wav", unwritable)
    player = SoundPlayer(tmp_path)
    assert player.resolve("Ding") is None

    # Nothing to play means no effect is ever created
    monkeypatch.setattr(audio, "HAS_SOUND", True)
    player.play("Ding")
    assert player.effect is None


def test_beep_is_synthesized(tmp_path, monkeypatch):
    monkeypatch.setattr(audio.tempfile, "gettempdir", lambda: str(tmp_path))
    path = SoundPlayer(tmp_path).resolve(audio.BEEP)

    with wave.open(path) as wf:
        assert wf.getframerate() == 44100
        assert wf.getnframes() > 0
