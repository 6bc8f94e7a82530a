#! /usr/bin/env python3

# Dual boot flag script

if __name__ == '__main__':
    from dualbootlib._cli import main
    main()
else:
    raise ImportError('dualboot is not importable. Import dualbootlib instead')
