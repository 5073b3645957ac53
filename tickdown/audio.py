import logging
import math
import os
import struct
import sys
import tempfile
import wave
from pathlib import Path
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, QUrl

from . import config

# QtMultimedia is an optional Qt module on some platforms; without it
# alarms are silent rather than fatal.
try:
    from PySide6.QtMultimedia import QSoundEffect
    HAS_SOUND = True
except ImportError:
    HAS_SOUND = False

_LOGGER = logging.getLogger(__name__)

BEEP = "Beep"

SOUND_FILES: Dict[str, str] = {
    "Alarm 01": "Alarm01.wav",
    "Alarm 02": "Alarm02.wav",
    "Alarm 03": "Alarm03.wav",
    "Alarm 04": "Alarm04.wav",
    "Alarm 05": "Alarm05.wav",
    "Alarm 06": "Alarm06.wav",
    "Alarm 07": "Alarm07.wav",
    "Alarm 08": "Alarm08.wav",
    "Alarm 09": "Alarm09.wav",
    "Alarm 10": "Alarm10.wav",
    "Ring 01": "Ring01.wav",
    "Ring 02": "Ring02.wav",
    "Ring 03": "Ring03.wav",
    "Ring 04": "Ring04.wav",
    "Ring 05": "Ring05.wav",
    "Chimes": "chimes.wav",
    "Chord": "chord.wav",
    "Ding": "ding.wav",
    "Notify": "notify.wav",
    "Tada": "tada.wav",
}


def default_media_folder() -> Path:
    override = os.environ.get("TICKDOWN_SOUNDS_DIR")
    if override:
        return Path(override)
    if sys.platform.startswith("win"):
        return Path(os.environ.get("WINDIR", r"C:\Windows")) / "Media"
    return Path(__file__).resolve().parent / "sounds"


def ensure_beep_wav() -> str:
    """Create a simple sine-wave .wav at runtime so one sound always exists."""
    path = os.path.join(tempfile.gettempdir(), "tickdown_beep.wav")
    if os.path.exists(path):
        return path

    sample_rate = 44100
    duration_s = 0.45
    freq_a = 880.0
    n_frames = int(sample_rate * duration_s)

    with wave.open(path, 'w') as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        frames = bytearray()
        for i in range(n_frames):
            # Smooth attack/release to avoid clicks
            t = i / sample_rate
            env = min(1.0, t*10) * min(1.0, (duration_s - t)*10)
            sample = int(32767 * env * math.sin(2*math.pi*freq_a*t))
            frames += struct.pack('<h', sample)
        wf.writeframes(frames)
    return path


class SoundPlayer(QObject):
    """Plays named alarm sounds with QSoundEffect.

    Unknown names fall back to the default sound and a missing file falls
    back to the synthesized beep. Playback is skipped silently only when
    not even the beep can be written.
    """

    def __init__(self, media_folder: Optional[Path] = None, parent=None):
        super().__init__(parent)
        self.media_folder = Path(media_folder) if media_folder else default_media_folder()
        self.effect = None

    def available_sounds(self) -> List[str]:
        return list(SOUND_FILES) + [BEEP]

    def resolve(self, sound_name: str) -> Optional[str]:
        """Path of the file backing ``sound_name``, or None when it is missing."""
        if sound_name == BEEP:
            return self._beep()

        file_name = SOUND_FILES.get(sound_name)
        if file_name is None:
            _LOGGER.debug("Unknown sound '%s', using %s", sound_name, config.DEFAULT_ALARM_SOUND)
            file_name = SOUND_FILES[config.DEFAULT_ALARM_SOUND]

        path = self.media_folder / file_name
        if not path.exists():
            _LOGGER.debug("Sound file %s not found, using %s", path, BEEP)
            return self._beep()
        return str(path)

    def _beep(self) -> Optional[str]:
        try:
            return ensure_beep_wav()
        except OSError as e:
            _LOGGER.warning("Could not write beep sound: %s", e)
            return None

    def play(self, sound_name: str):
        path = self.resolve(sound_name)
        if path is None or not HAS_SOUND:
            return

        self.stop()
        self.effect = QSoundEffect(self)
        self.effect.setSource(QUrl.fromLocalFile(path))
        self.effect.setLoopCount(1)
        self.effect.setVolume(0.8)
        self.effect.play()

    def stop(self):
        if self.effect is not None:
            self.effect.stop()
            self.effect.deleteLater()
            self.effect = None
