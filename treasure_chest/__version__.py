__title__ = 'treasure_chest'
__description__ = 'Create memoizing caches easily'
__url__ = 'https://github.com/iwburns/treasure-chest'
__version__ = '0.1.0'
__author__ = 'Treasure Chest Developers'
__license__ = 'MIT'
