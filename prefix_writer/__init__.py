from prefix_writer.writer import FlushMode, PrefixWriter, Sink

__all__ = ['FlushMode', 'PrefixWriter', 'Sink']
