"""Fixed storage keys for persisted snapshots."""

PREDICTION_CACHE = "predictionCache"
ANALYSIS_CACHE = "analysisCache"
ERROR_LOGS = "errorLogs"
CACHE_STATS = "cacheStats"
TRAINING_DATA = "mlTrainingData"
TRAINING_HISTORY = "trainingHistory"
MODEL_ACCURACY = "modelAccuracy"
LAST_TRAINING = "lastTraining"
METRICS = "mlMetrics"
