# tradedesk/logic.py

import numpy as np
import pandas as pd
import ta
from typing import List, Optional
from sqlalchemy.orm import Session
from sklearn.linear_model import LinearRegression
from tradedesk.errors import ValidationError
from tradedesk.models import Price, TrendAnalysis
from logger import logger

MIN_HISTORY = 50
PREDICTION_HORIZON = 24  # price points ahead (hourly history)


def get_price_data(agent_id: str, db: Session) -> pd.DataFrame:
    """
    Retrieves the stored price history of an agent.

    Args:
        agent_id (str): The agent identifier.
        db (Session): SQLAlchemy database session.

    Returns:
        pd.DataFrame: Columns timestamp, value and volume, oldest first.
    """
    logger.debug(f"Fetching price data for agent {agent_id}")
    prices = db.query(Price).filter(Price.agent_id == agent_id).order_by(Price.timestamp).all()
    logger.debug(f"Number of price records retrieved: {len(prices)}")

    if not prices:
        logger.warning(f"No price data found for agent: {agent_id}")
        return pd.DataFrame(columns=['timestamp', 'value', 'volume'])

    return pd.DataFrame([{
        'timestamp': price.timestamp,
        'value': price.value,
        'volume': price.volume
    } for price in prices])


def _last(series: pd.Series, default: Optional[float] = None) -> Optional[float]:
    value = series.iloc[-1] if len(series) else np.nan
    return default if pd.isna(value) else float(value)


def calculate_technical_indicators(close: pd.Series) -> dict:
    """
    Calculates the latest RSI, MACD line and simple moving averages.

    Args:
        close (pd.Series): Prices, oldest first.

    Returns:
        dict: rsi, macd, moving_avg_50 and moving_avg_200 (None below 200 points).
    """
    logger.debug("Calculating technical indicators.")
    rsi = _last(ta.momentum.RSIIndicator(close=close, window=14).rsi(), default=50.0)
    macd = _last(ta.trend.MACD(close=close, window_slow=26, window_fast=12).macd(), default=0.0)
    sma_50 = _last(ta.trend.SMAIndicator(close=close, window=50).sma_indicator(), default=float(close.iloc[-1]))
    sma_200 = None
    if len(close) >= 200:
        sma_200 = _last(ta.trend.SMAIndicator(close=close, window=200).sma_indicator())

    return {'rsi': rsi, 'macd': macd, 'moving_avg_50': sma_50, 'moving_avg_200': sma_200}


def determine_trend_direction(current: float, ma_50: float, ma_200: Optional[float], macd: float) -> str:
    if ma_200 is not None and current > ma_200 and ma_50 > ma_200 and macd > 0:
        return 'bullish'
    if ma_200 is not None and current < ma_200 and ma_50 < ma_200 and macd < 0:
        return 'bearish'
    if ma_50 and abs(current - ma_50) / ma_50 < 0.02:
        return 'consolidating'
    return 'neutral'


def calculate_trend_strength(rsi: float, macd: float) -> float:
    strength = 50.0

    # Overbought or oversold readings count fully
    if rsi > 70 or rsi < 30:
        strength += 25
    else:
        strength += abs(rsi - 50) / 2

    strength += min(25.0, abs(macd) * 10)
    return min(100.0, strength)


def detect_levels(close: pd.Series, kind: str) -> List[float]:
    """
    Finds the last three strict local minima ('support') or maxima
    ('resistance') within a +/-2 point window over the last 100 points.
    """
    recent = close.iloc[-100:].reset_index(drop=True)
    if kind == 'support':
        mask = ((recent < recent.shift(1)) & (recent < recent.shift(2))
                & (recent < recent.shift(-1)) & (recent < recent.shift(-2)))
    else:
        mask = ((recent > recent.shift(1)) & (recent > recent.shift(2))
                & (recent > recent.shift(-1)) & (recent > recent.shift(-2)))
    return [float(level) for level in recent[mask].tolist()[-3:]]


def detect_patterns(close: pd.Series) -> List[str]:
    recent = close.iloc[-50:]
    first = float(recent.iloc[0])
    move = float(recent.iloc[-1]) - first

    patterns = []
    if move > first * 0.1:
        patterns.append('ascending_triangle')
    if move < -first * 0.1:
        patterns.append('descending_triangle')
    return patterns


def analyze_volume_trend(volume: pd.Series) -> str:
    recent = volume.iloc[-20:].fillna(0)
    average = recent.mean()
    current = recent.iloc[-1]

    if current > average * 1.5:
        return 'increasing'
    if current < average * 0.5:
        return 'decreasing'
    return 'stable'


def predict_price(close: pd.Series, steps_ahead: int = PREDICTION_HORIZON) -> dict:
    """
    Extrapolates a linear regression of price on time over the last 100 points.

    Returns:
        dict: price, direction ('up' or 'down') and confidence (50-85).
    """
    recent = close.iloc[-100:].to_numpy(dtype=np.float64)
    X = np.arange(len(recent)).reshape(-1, 1)

    model = LinearRegression()
    model.fit(X, recent)

    slope = float(model.coef_[0])
    predicted = float(model.predict(np.array([[len(recent) + steps_ahead]]))[0])
    direction = 'up' if predicted > recent[-1] else 'down'
    confidence = min(85.0, 50 + abs(slope) * 1000)
    return {'price': predicted, 'direction': direction, 'confidence': confidence}


def calculate_trend_duration(close: pd.Series, direction: str) -> int:
    rising = direction == 'bullish'
    changes = close.diff().iloc[1:].tolist()

    duration = 0
    for change in reversed(changes):
        if (rising and change > 0) or (not rising and change < 0):
            duration += 1
        else:
            break
    return duration


def analyze_trend(data: pd.DataFrame) -> dict:
    """
    Runs the trend detector over a price history.

    Args:
        data (pd.DataFrame): Columns value and (optionally) volume, oldest first.

    Returns:
        dict: Fields of a TrendAnalysis record.

    Raises:
        ValidationError: If fewer than 50 price points are available.
    """
    if data.empty or len(data) < MIN_HISTORY:
        logger.error(f"Not enough price history for trend analysis. Data length: {len(data)}")
        raise ValidationError(
            "Insufficient price history for trend analysis",
            required=MIN_HISTORY, available=len(data)
        )

    close = pd.to_numeric(data['value'], errors='coerce').astype(np.float64).reset_index(drop=True)
    volume = data['volume'] if 'volume' in data else pd.Series(0.0, index=data.index)
    volume = pd.to_numeric(volume, errors='coerce').reset_index(drop=True)

    indicators = calculate_technical_indicators(close)
    current_price = float(close.iloc[-1])
    direction = determine_trend_direction(
        current_price, indicators['moving_avg_50'], indicators['moving_avg_200'], indicators['macd']
    )
    patterns = detect_patterns(close)
    prediction = predict_price(close)

    logger.info(f"Trend direction: {direction}, RSI: {indicators['rsi']}, MACD: {indicators['macd']}")
    return {
        'trend_direction': direction,
        'trend_strength': calculate_trend_strength(indicators['rsi'], indicators['macd']),
        'trend_duration_hours': calculate_trend_duration(close, direction),
        'support_levels': detect_levels(close, 'support'),
        'resistance_levels': detect_levels(close, 'resistance'),
        'detected_patterns': patterns,
        'pattern_confidence': 75.0 if patterns else 0.0,
        'rsi': indicators['rsi'],
        'macd': indicators['macd'],
        'moving_avg_50': indicators['moving_avg_50'],
        'moving_avg_200': indicators['moving_avg_200'],
        'volume_trend': analyze_volume_trend(volume),
        'predicted_price_24h': prediction['price'],
        'predicted_direction': prediction['direction'],
        'confidence_score': prediction['confidence'],
    }


def run_trend_analysis(agent_id: str, db: Session) -> TrendAnalysis:
    """
    Analyzes an agent's stored price history and persists the result.

    Returns:
        TrendAnalysis: The stored analysis.
    """
    logger.info(f"Analyzing trends for agent {agent_id}")
    analysis = TrendAnalysis(agent_id=agent_id, **analyze_trend(get_price_data(agent_id, db)))
    db.add(analysis)
    db.commit()
    db.refresh(analysis)
    logger.info(f"Trend analysis complete for agent {agent_id}")
    return analysis
