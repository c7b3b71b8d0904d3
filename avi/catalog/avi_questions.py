"""
avi/catalog/avi_questions.py
=============================
Default AVI Question Dataset - 55 questions, 8 categories

The interview is conducted in Spanish with public-transport operators
applying for a unit-financing credit. Tag values (verification triggers,
stress patterns, truth keywords) are snake_case Spanish phrases; an
underscore matches a space in the transcript.

Distribution:
    basic_info 6, daily_operation 8, operational_costs 7,
    business_structure 8, assets_patrimony 6, credit_history 6,
    payment_intention 6, risk_evaluation 8
"""

from avi.catalog.questions import (
    Category,
    Question,
    QuestionAnalytics,
    QuestionCatalog,
    RiskImpact,
)

CATALOG_VERSION: str = "avi-55-v1"

_LOW = RiskImpact.LOW
_MEDIUM = RiskImpact.MEDIUM
_HIGH = RiskImpact.HIGH

# Transcript phrases that commonly accompany hesitation, shared by most
# money-related questions.
_HEDGING: tuple[str, ...] = ("mas_o_menos", "depende", "no_recuerdo", "no_estoy_seguro")


def _q(
    qid: str,
    category: Category,
    text: str,
    weight: int,
    stress: int,
    impact: RiskImpact,
    est_time: float,
    expected: float,
    triggers: tuple[str, ...],
    stress_patterns: tuple[str, ...] = (),
    truth_keywords: tuple[str, ...] = (),
    follow_ups: tuple[str, ...] = (),
) -> Question:
    return Question(
        id=qid,
        category=category,
        question=text,
        weight=weight,
        stress_level=stress,
        estimated_time=est_time,
        risk_impact=impact,
        analytics=QuestionAnalytics(
            expected_response_time=expected,
            stress_indicator_patterns=stress_patterns,
            truth_verification_keywords=truth_keywords,
        ),
        verification_triggers=triggers,
        follow_up_questions=follow_ups,
    )


_B = Category.BASIC_INFO
_D = Category.DAILY_OPERATION
_C = Category.OPERATIONAL_COSTS
_S = Category.BUSINESS_STRUCTURE
_A = Category.ASSETS_PATRIMONY
_H = Category.CREDIT_HISTORY
_P = Category.PAYMENT_INTENTION
_R = Category.RISK_EVALUATION


AVI_QUESTIONS: tuple[Question, ...] = (
    # --- basic_info (6) ---------------------------------------------------
    _q("nombre_completo", _B, "¿Cuál es su nombre completo?",
       3, 1, _LOW, 15, 5, ("identidad",),
       truth_keywords=("me_llamo",)),
    _q("edad", _B, "¿Qué edad tiene?",
       4, 1, _LOW, 10, 4, ("identidad", "experiencia"),
       truth_keywords=("anos", "cumpli")),
    _q("estado_civil", _B, "¿Cuál es su estado civil?",
       3, 1, _LOW, 10, 4, ("identidad",),
       truth_keywords=("casado", "soltero", "union_libre")),
    _q("dependientes_economicos", _B, "¿Cuántas personas dependen económicamente de usted?",
       5, 2, _MEDIUM, 20, 6, ("gastos_familiares",),
       stress_patterns=("no_se_cuantos",),
       truth_keywords=("hijos", "esposa", "mis_papas")),
    _q("domicilio_actual", _B, "¿Dónde vive actualmente y desde hace cuánto tiempo?",
       4, 1, _LOW, 20, 6, ("identidad", "arraigo"),
       truth_keywords=("colonia", "desde_hace")),
    _q("anos_en_ruta", _B, "¿Cuántos años lleva trabajando en la ruta?",
       6, 2, _MEDIUM, 20, 6, ("experiencia", "estabilidad_ruta"),
       stress_patterns=("no_recuerdo",),
       truth_keywords=("anos", "desde_que", "empece")),

    # --- daily_operation (8) ----------------------------------------------
    _q("ruta_asignada", _D, "¿Qué ruta cubre y cuál es su recorrido?",
       4, 1, _LOW, 25, 8, ("estabilidad_ruta",),
       truth_keywords=("base", "terminal", "recorrido")),
    _q("horario_trabajo", _D, "¿Cuál es su horario de trabajo?",
       3, 1, _LOW, 15, 6, ("volumen_operacion",),
       truth_keywords=("de_la_manana", "hasta_las")),
    _q("dias_trabajo_semana", _D, "¿Cuántos días a la semana trabaja la unidad?",
       5, 2, _MEDIUM, 15, 5, ("volumen_operacion",),
       truth_keywords=("dias", "descanso")),
    _q("vueltas_por_dia", _D, "¿Cuántas vueltas da al día?",
       9, 3, _HIGH, 20, 6, ("volumen_operacion", "ingresos"),
       stress_patterns=_HEDGING,
       truth_keywords=("vueltas", "cada_vuelta"),
       follow_ups=("pasajeros_por_vuelta", "vueltas_por_tanque")),
    _q("pasajeros_por_vuelta", _D, "¿Cuántos pasajeros lleva en promedio por vuelta?",
       7, 2, _MEDIUM, 20, 6, ("volumen_operacion", "ingresos"),
       stress_patterns=_HEDGING,
       truth_keywords=("pasajeros", "lleno")),
    _q("tarifa_por_pasajero", _D, "¿Cuál es la tarifa por pasajero?",
       6, 1, _LOW, 10, 4, ("ingresos",),
       truth_keywords=("pesos", "tarifa")),
    _q("ingresos_promedio_diarios", _D, "¿Cuánto ingresa en promedio al día?",
       10, 4, _HIGH, 30, 8, ("ingresos", "capacidad_pago"),
       stress_patterns=_HEDGING + ("no_llevo_cuentas",),
       truth_keywords=("pesos", "diarios", "al_dia"),
       follow_ups=("vueltas_por_dia", "coherencia_ingresos_gastos")),
    _q("dias_baja_demanda", _D, "¿Qué días o temporadas baja el pasaje?",
       6, 3, _MEDIUM, 25, 8, ("ingresos", "estabilidad_ruta"),
       stress_patterns=("depende",),
       truth_keywords=("vacaciones", "domingo", "temporada")),

    # --- operational_costs (7) --------------------------------------------
    _q("gasto_diario_gasolina", _C, "¿Cuánto gasta diario en combustible?",
       9, 3, _HIGH, 20, 6, ("combustible", "gastos_operacion"),
       stress_patterns=_HEDGING,
       truth_keywords=("pesos", "litros", "diario"),
       follow_ups=("vueltas_por_tanque",)),
    _q("vueltas_por_tanque", _C, "¿Cuántas vueltas hace con un tanque lleno?",
       5, 2, _MEDIUM, 20, 6, ("combustible",),
       stress_patterns=("no_recuerdo",),
       truth_keywords=("tanque", "vueltas")),
    _q("gasto_mantenimiento_mensual", _C, "¿Cuánto gasta al mes en mantenimiento de la unidad?",
       7, 3, _MEDIUM, 25, 8, ("gastos_operacion",),
       stress_patterns=_HEDGING,
       truth_keywords=("servicio", "llantas", "afinacion")),
    _q("pago_semanal_tarjeta", _C, "¿Cuánto paga a la semana por la tarjeta o derecho de ruta?",
       9, 4, _HIGH, 20, 6, ("gastos_operacion", "compromisos"),
       stress_patterns=_HEDGING,
       truth_keywords=("semana", "pesos", "tarjeta")),
    _q("gastos_mordidas_cuotas", _C, "¿Cuánto paga a la semana en cuotas no oficiales o mordidas?",
       9, 5, _HIGH, 30, 10, ("gastos_operacion", "pagos_informales"),
       stress_patterns=_HEDGING + ("prefiero_no_contestar", "eso_no"),
       truth_keywords=("cuota", "semana", "pesos"),
       follow_ups=("seguridad_personal",)),
    _q("pago_chofer_ayudante", _C, "¿Cuánto le paga al chofer o ayudante?",
       6, 2, _MEDIUM, 20, 6, ("gastos_operacion",),
       truth_keywords=("chofer", "al_dia", "porcentaje")),
    _q("gasto_seguro_unidad", _C, "¿La unidad tiene seguro y cuánto paga por él?",
       5, 2, _MEDIUM, 20, 6, ("gastos_operacion", "proteccion_activo"),
       truth_keywords=("poliza", "aseguradora")),

    # --- business_structure (8) -------------------------------------------
    _q("tipo_operacion", _S, "¿Es dueño de la unidad, la renta o trabaja para alguien?",
       8, 3, _HIGH, 20, 6, ("propiedad", "valor_activo"),
       stress_patterns=("depende",),
       truth_keywords=("soy_dueno", "propia", "rento"),
       follow_ups=("valor_unidad_transporte",)),
    _q("propietario_unidad", _S, "¿A nombre de quién está la unidad?",
       7, 3, _MEDIUM, 15, 5, ("propiedad",),
       stress_patterns=("no_se",),
       truth_keywords=("a_mi_nombre", "factura")),
    _q("numero_unidades", _S, "¿Cuántas unidades opera usted o su familia?",
       6, 2, _MEDIUM, 15, 5, ("propiedad", "volumen_operacion"),
       truth_keywords=("unidades", "solo_una")),
    _q("pertenece_ruta_organizacion", _S, "¿A qué organización o asociación de ruta pertenece?",
       6, 3, _MEDIUM, 20, 6, ("estabilidad_ruta",),
       truth_keywords=("asociacion", "derrotero")),
    _q("cuota_organizacion", _S, "¿Cuánto aporta a la organización de la ruta?",
       7, 4, _MEDIUM, 20, 6, ("compromisos", "pagos_informales"),
       stress_patterns=_HEDGING + ("prefiero_no_contestar",),
       truth_keywords=("cuota", "semana")),
    _q("chofer_propio", _S, "¿Maneja usted mismo la unidad o tiene chofer?",
       5, 2, _LOW, 10, 4, ("volumen_operacion",),
       truth_keywords=("yo_manejo", "chofer")),
    _q("permiso_concesion", _S, "¿La concesión o permiso está vigente y a nombre de quién?",
       8, 3, _HIGH, 20, 6, ("propiedad", "estabilidad_ruta"),
       stress_patterns=("en_tramite", "no_se"),
       truth_keywords=("vigente", "concesion")),
    _q("otros_ingresos", _S, "¿Tiene otros ingresos además de la ruta?",
       6, 4, _MEDIUM, 20, 6, ("ingresos", "capacidad_pago"),
       stress_patterns=("a_veces", "depende"),
       truth_keywords=("negocio", "tambien")),

    # --- assets_patrimony (6) ---------------------------------------------
    _q("valor_unidad_transporte", _A, "¿Cuánto vale actualmente su unidad?",
       8, 3, _HIGH, 20, 6, ("valor_activo",),
       stress_patterns=_HEDGING,
       truth_keywords=("pesos", "modelo", "vale")),
    _q("antiguedad_unidad", _A, "¿De qué año es la unidad?",
       5, 1, _LOW, 10, 4, ("valor_activo",),
       truth_keywords=("modelo", "ano")),
    _q("vivienda_propia", _A, "¿La casa donde vive es propia, rentada o prestada?",
       5, 2, _MEDIUM, 15, 5, ("arraigo", "patrimonio"),
       truth_keywords=("propia", "rentada", "prestada")),
    _q("otros_bienes", _A, "¿Tiene otros bienes como terrenos o vehículos?",
       5, 2, _LOW, 20, 6, ("patrimonio",),
       truth_keywords=("terreno", "carro")),
    _q("ahorros_emergencia", _A, "¿Cuenta con ahorros para emergencias?",
       7, 3, _MEDIUM, 20, 6, ("patrimonio", "capacidad_pago"),
       stress_patterns=("no_tengo", "casi_nada"),
       truth_keywords=("ahorro", "tanda", "guardado")),
    _q("unidad_como_garantia", _A, "¿Estaría dispuesto a dejar la unidad como garantía?",
       7, 3, _MEDIUM, 15, 5, ("valor_activo", "compromisos"),
       stress_patterns=("no_se", "depende"),
       truth_keywords=("si", "claro")),

    # --- credit_history (6) -----------------------------------------------
    _q("creditos_anteriores", _H, "¿Ha tenido créditos anteriormente? ¿Con quién?",
       9, 4, _HIGH, 25, 8, ("historial_credito",),
       stress_patterns=("no_recuerdo", "creo_que_no"),
       truth_keywords=("financiera", "banco", "pague"),
       follow_ups=("problemas_pagos",)),
    _q("problemas_pagos", _H, "¿Ha tenido atrasos o problemas para pagar algún crédito?",
       9, 5, _HIGH, 25, 8, ("historial_credito", "capacidad_pago"),
       stress_patterns=("no_recuerdo", "nunca_jamas", "prefiero_no_contestar"),
       truth_keywords=("atraso", "liquide", "al_corriente"),
       follow_ups=("deudas_actuales",)),
    _q("deudas_actuales", _H, "¿Qué deudas tiene actualmente y cuánto paga por ellas?",
       9, 5, _HIGH, 30, 8, ("compromisos", "historial_credito"),
       stress_patterns=_HEDGING + ("ninguna_deuda",),
       truth_keywords=("debo", "pago", "mensualidad")),
    _q("compromisos_existentes", _H, "¿Tiene otros compromisos fijos como tandas o préstamos familiares?",
       7, 4, _MEDIUM, 20, 6, ("compromisos",),
       stress_patterns=("depende",),
       truth_keywords=("tanda", "prestamo")),
    _q("buro_credito", _H, "¿Sabe cómo está en el buró de crédito?",
       8, 4, _HIGH, 15, 5, ("historial_credito",),
       stress_patterns=("no_se", "creo_que_bien"),
       truth_keywords=("limpio", "reporte")),
    _q("prestamos_informales", _H, "¿Ha pedido dinero prestado a agiotistas o prestamistas?",
       8, 5, _HIGH, 20, 6, ("pagos_informales", "compromisos"),
       stress_patterns=("prefiero_no_contestar", "eso_no", "nerviosismo_extremo"),
       truth_keywords=("prestamista", "interes")),

    # --- payment_intention (6) --------------------------------------------
    _q("motivacion_credito", _P, "¿Para qué necesita el crédito?",
       6, 2, _MEDIUM, 25, 8, ("destino_credito",),
       truth_keywords=("unidad_nueva", "renovar", "motor")),
    _q("plan_pago_propuesto", _P, "¿Cómo piensa pagar el crédito cada semana?",
       10, 4, _HIGH, 30, 8, ("capacidad_pago", "compromisos"),
       stress_patterns=_HEDGING + ("ya_vere",),
       truth_keywords=("cada_semana", "apartar", "de_lo_que_saco"),
       follow_ups=("monto_pago_semanal_posible", "respaldo_pago_emergencia")),
    _q("monto_pago_semanal_posible", _P, "¿Cuánto podría pagar a la semana sin problema?",
       9, 4, _HIGH, 20, 6, ("capacidad_pago", "ingresos"),
       stress_patterns=_HEDGING,
       truth_keywords=("pesos", "semana")),
    _q("respaldo_pago_emergencia", _P, "Si un día no trabaja la unidad, ¿cómo pagaría?",
       8, 4, _HIGH, 25, 8, ("capacidad_pago", "patrimonio"),
       stress_patterns=("ya_vere", "no_se"),
       truth_keywords=("ahorro", "familia", "aval")),
    _q("referencias_comerciales", _P, "¿Quién puede dar referencias de usted en la ruta?",
       5, 2, _LOW, 20, 6, ("estabilidad_ruta", "arraigo"),
       truth_keywords=("companero", "delegado")),
    _q("disposicion_documentos", _P, "¿Puede entregarnos comprobantes de ingresos y de la unidad?",
       7, 3, _MEDIUM, 15, 5, ("documentacion",),
       stress_patterns=("no_tengo", "depende"),
       truth_keywords=("si", "factura", "comprobante")),

    # --- risk_evaluation (8) ----------------------------------------------
    _q("seguridad_personal", _R, "¿Ha sufrido asaltos o amenazas en la ruta?",
       7, 5, _HIGH, 25, 8, ("riesgo_ruta", "pagos_informales"),
       stress_patterns=("prefiero_no_contestar", "eso_no", "nerviosismo_extremo"),
       truth_keywords=("asalto", "denuncia")),
    _q("coherencia_ingresos_gastos", _R, "Con lo que gana y lo que gasta, ¿cuánto le queda libre a la semana?",
       10, 5, _HIGH, 30, 10, ("ingresos", "gastos_operacion", "capacidad_pago"),
       stress_patterns=_HEDGING + ("no_llevo_cuentas",),
       truth_keywords=("me_queda", "libre", "pesos")),
    _q("confirmacion_datos_criticos", _R, "¿Confirma que sus ingresos diarios y pagos semanales son los que nos dijo?",
       9, 5, _HIGH, 20, 6, ("ingresos", "compromisos"),
       stress_patterns=("creo_que_si", "mas_o_menos", "evasion_total"),
       truth_keywords=("confirmo", "si_correcto")),
    _q("situacion_salud", _R, "¿Tiene algún problema de salud que le impida trabajar?",
       6, 3, _MEDIUM, 15, 5, ("riesgo_personal",),
       truth_keywords=("sano", "ninguno")),
    _q("conflictos_ruta", _R, "¿Hay conflictos entre organizaciones en su ruta?",
       7, 5, _HIGH, 25, 8, ("riesgo_ruta", "estabilidad_ruta"),
       stress_patterns=("prefiero_no_contestar", "eso_no"),
       truth_keywords=("tranquilo", "problemas")),
    _q("incidentes_unidad", _R, "¿La unidad ha tenido accidentes o infracciones graves?",
       7, 4, _MEDIUM, 20, 6, ("riesgo_ruta", "proteccion_activo"),
       stress_patterns=("no_recuerdo",),
       truth_keywords=("choque", "multa", "ninguno")),
    _q("estabilidad_ruta", _R, "¿Cree que su ruta seguirá operando igual en los próximos años?",
       6, 3, _MEDIUM, 20, 6, ("estabilidad_ruta",),
       stress_patterns=("depende",),
       truth_keywords=("seguro", "concesion")),
    _q("riesgos_futuros", _R, "¿Qué podría impedirle pagar el crédito?",
       8, 4, _HIGH, 25, 8, ("capacidad_pago", "riesgo_personal"),
       stress_patterns=("nada", "no_se"),
       truth_keywords=("enfermedad", "accidente", "baja_pasaje")),
)


def load_default_catalog() -> QuestionCatalog:
    """Build a fresh catalog holding the default AVI question set."""
    return QuestionCatalog(AVI_QUESTIONS, version=CATALOG_VERSION)
