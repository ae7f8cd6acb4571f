"""Constants for the slot bank.

- ``slotbank.constants.leds`` - Indicator (LED) color values
- ``slotbank.constants.apc_key_25`` - Note and CC layout of the APC Key 25 mk2 controller
- ``slotbank.constants.default_library`` - The built-in 40-slot pattern library
"""
