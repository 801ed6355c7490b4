"""
FI_Libs - FlexImage Library Modules

This package attaches a single master image to a persisted record and
renders derived images through named transform operators. It is organized
into specialized sub-packages:

- StorageLib: Master image path derivation and on-disk storage
- ImageEditingLib: Decoding master images and rendering delivery output
- OperatorsLib: Operator contract, registry and built-in operators
- PipelineLib: Pipeline sessions that apply operators to one image
- ModelLib: Wiring that attaches all of the above to a host record
"""

__version__ = "0.1.0"
