"""
match-feed: flux de matchs de foot a proximite
Filtrage, enrichissement et tri des matchs affiches a un joueur
"""
