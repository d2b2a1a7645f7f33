
"""
Reverie - real-time sonification of streamed reasoning text.

Reverie listens to text as it arrives, a few words at a time, and turns
the shape of the thinking into sound.  Each chunk is scanned for eleven
linguistic markers (hedges, questions, revisions, conclusions and so on),
scored for intensity and mapped to a pitch, then played across five
layered registers.  It generates pure MIDI (no audio engine), so any
synth, DAW or software instrument can voice it.

How it hears:

- **Markers.** Keyword and punctuation rules flag uncertainty, certainty,
  hedging, questions, revision, resolution, causation, enumeration,
  emphasis, negation and comparison.
- **Intensity and pitch.** A fixed priority ladder gives each chunk an
  intensity in [0, 1]; pitch rises with intensity and with clause
  complexity (commas and parentheses).
- **Five layers.** Bass sustains grounding tones, mid plays gestures
  (a falling run for revision, a rising arpeggio for questions, a triad
  for certainty), high adds sparkle, pad holds consonant or dissonant
  chords, and texture adds filtered noise.
- **Four mixable axes.** Certainty, reasoning, revision and resolution
  can be muted, soloed and leveled like channel strips, from code or
  over OSC.
- **Closing flourish.** A resolving C major chord marks the end of a
  stream.

Integration:

- **MIDI out.** One channel per layer; noise is a drum-style note with
  its cutoff on CC 74.
- **OSC.** Remote mute/solo/volume, plus ``/axes`` and ``/trend``
  broadcasts for visualisers.
- **Replay.** Record a session as JSON lines and re-drive it through the
  live pipeline at any speed.

Minimal example:

    ```python
    import reverie

    engine = reverie.Engine()
    engine.connect_midi("IAC Driver Bus 1")

    engine.reset()
    await engine.start()

    engine.add_delta("Wait, actually I think ")
    engine.add_delta("therefore the answer is 42.")

    engine.start_flourish()
    ```

Package-level exports: ``Engine``, ``EngineConfig``, ``MidiBackend``,
``MixerSetting``, ``PatternFlags``, ``AudioBackendError``, ``detect``.
"""

import reverie.backend
import reverie.config
import reverie.engine
import reverie.mixer
import reverie.patterns


AudioBackendError = reverie.backend.AudioBackendError
Engine = reverie.engine.Engine
EngineConfig = reverie.config.EngineConfig
MidiBackend = reverie.backend.MidiBackend
MixerSetting = reverie.mixer.MixerSetting
PatternFlags = reverie.patterns.PatternFlags
detect = reverie.patterns.detect
