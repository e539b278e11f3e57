# gamebase

A small toolkit of game-engine building blocks that works without a window or
a GPU:

- `gamebase.scene`: a transform hierarchy (`Transform`, `Camera`, `Light`,
  `LightType`, `Drawable`, `Pipeline`, `Scene`) with matrix helpers
  (`make_local_to_world`, `make_world_to_local`, `Camera.make_projection`) and
  quaternion helpers (`angle_axis`, `quat_multiply`, `quat_rotate`,
  `quat_to_mat3`). `Scene.from_file` and `Scene.load` read binary scene files;
  `Scene.copy` and `Scene.set` duplicate a scene with its references fixed up.
  Format errors raise `SceneError`.
- `gamebase.chunk`: reads and writes the tagged binary chunks those files are
  built from (`read_chunk`, `write_chunk`), using `struct` formats for the
  records. Errors are raised as `ChunkError`.
- `gamebase.sound`: a software stereo mixer (`Mixer`) that plays mono
  `Sample`s in 2D (panned) or 3D (placed around a `Listener`), with smooth
  `Ramp`ed changes to volume, pan and position. `Mixer.mix` returns the next
  block of 1024 stereo frames at 48 kHz as a `(1024, 2)` float32 array.
- `gamebase.wav`: `load_wav` reads PCM (8/16/24/32-bit) or float WAV files as
  48 kHz mono float32, averaging channels and resampling other rates.
- `gamebase.png`: `load_png` and `save_png` for 8-bit RGBA images, with the
  row order chosen by `Origin.LOWER_LEFT` or `Origin.UPPER_LEFT`.
- `gamebase.orbit_camera`: `OrbitCamera`, a z-up trackball camera driven by
  `press`, `motion` (tumble, or pan with shift) and `wheel` input, and placed
  onto a scene `Camera` with `apply`.
- `gamebase.path_font`: glyph lookup for line-drawn fonts (`PathFont`).
- `gamebase.hex_dump`: `xxd`-style dumps of binary data.
- `gamebase.data_path`: builds paths relative to the running program.

## Install

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
import numpy as np
from gamebase.sound import Mixer, Sample

mixer = Mixer()
beep = Sample(np.sin(np.linspace(0, 440 * 2 * np.pi, 48000)).astype(np.float32))
playing = mixer.play(beep, volume=0.5, pan=-1.0)
block = mixer.mix()   # one block of stereo frames
playing.stop()
```

```python
from gamebase.scene import Scene

scene = Scene.from_file("level.scene", None)
for transform in scene.transforms:
    print(transform.name, transform.make_local_to_world())
```

## What it does not do

- It does not draw anything. `Pipeline` and `Drawable` only hold drawing
  settings; there is no window, no graphics calls, no line or text drawing
  with `PathFont`, and no mesh-buffer loading.
- It does not open an audio device. `Mixer.mix` produces sample blocks; sending
  them to speakers is up to the caller. `Sample.from_file` loads `.wav` files
  only.
- It has no game, client, server or viewer program and installs no commands.