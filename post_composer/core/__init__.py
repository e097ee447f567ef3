"""画布合成引擎."""
