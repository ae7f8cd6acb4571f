"""
Slotbank - a live pattern bank for a clip-grid controller.

Slotbank holds 40 pattern programs, one per button of a clip-launch grid, and
plays any combination of them as a single layered program on an external
pattern-evaluation engine. It speaks MIDI to the controller and OSC to the
renderer; it makes no sound of its own.

What it does:

- **One composite, always current.** Starting or stopping a slot rebuilds
  the combined program from every playing slot and swaps it in. A program
  the engine rejects never interrupts what is already playing.
- **Placeholders become knobs.** Write ``$speed`` or ``$cutoff`` in a
  program and it becomes a parameter with a range, a value, and an optional
  knob. Values are substituted into the text at playback.
- **Knobs that find whole numbers.** Relative encoders move a parameter by
  1/127 of its range per tick, and land on whole numbers when approaching
  them, without getting stuck there.
- **Hot-swap code.** Replace a playing slot's program without stopping the
  others; tuned parameter values survive the edit.
- **A catalog of well-known parameters.** Add filter, reverb, gain and other
  controls to any slot with a ready-made code fragment.

Minimal example:

    ```python
    import slotbank
    import slotbank.constants.default_library

    engine = slotbank.PlaybackEngine(
        slotbank.OscEvaluator(),
        slotbank.constants.default_library.build()
    )

    engine.start(35)
    engine.select(35)
    engine.assign_parameter(35, "speed", 0)
    engine.handle_knob(slotbank.KnobEvent(control_index=0, delta=10))
    ```

Package-level exports: ``PlaybackEngine``, ``ButtonEvent``, ``KnobEvent``,
``OscEvaluator``, ``ParameterCatalog``, ``DynamicParameter``,
``PatternSlotDefinition``.
"""

import slotbank.catalog
import slotbank.engine
import slotbank.evaluator
import slotbank.parameters
import slotbank.slots


PlaybackEngine = slotbank.engine.PlaybackEngine
ButtonEvent = slotbank.engine.ButtonEvent
KnobEvent = slotbank.engine.KnobEvent
OscEvaluator = slotbank.evaluator.OscEvaluator
ParameterCatalog = slotbank.catalog.ParameterCatalog
DynamicParameter = slotbank.parameters.DynamicParameter
PatternSlotDefinition = slotbank.slots.PatternSlotDefinition
