"""
Core timeline logic for Beatforge.

Modules:
- models: Immutable data structures (Keyframe, EditorObject, Transform, etc.)
- interpolation: Keyframe interpolation into continuous transforms
- beat_grid: BPM grid math and snapping
- mapper: Time/pixel/screen coordinate mapping and scrolling
- timeline: Editor timeline model (objects, keyframes, selection)
- commands: Command pattern for undo/redo
- settings: Settings file, engine config, logging setup
- constants: Grid, limit and timeline constants
"""
